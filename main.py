from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from plutus.api.router import router as api_router
from plutus.core.config import settings
from plutus.core.exceptions.handlers import register_exception_handlers
from plutus.core.lifespan import lifespan
from plutus.core.middlewares import LogRequestsMiddleware
from plutus.core.responses import send_success

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.PROJECT_VERSION,
    debug=settings.DEBUG,
    lifespan=lifespan,
    openapi_tags=[
        {"name": "Catalog", "description": "Menu facets and product search"},
        {"name": "Auth", "description": "Session-less account endpoints"},
        {"name": "Enquiry", "description": "Lead capture"},
    ],
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins_list,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS", "PUT", "DELETE"],
    allow_headers=["Content-Type", "Authorization", "X-Requested-With", "Origin", "Accept"],
    max_age=86400,
)

# Add logging middleware
app.add_middleware(LogRequestsMiddleware)

# Register all exception handlers
register_exception_handlers(app)

# Include API routers
app.include_router(api_router)


@app.get("/health")
async def health_check():
    return send_success(
        message="OK", data={"status": "healthy", "version": settings.PROJECT_VERSION}
    )
