from fastapi import APIRouter, Depends

from plutus.api.endpoints.auth import router as auth_router
from plutus.api.endpoints.catalog import router as catalog_router
from plutus.api.endpoints.enquiry import router as enquiry_router
from plutus.core.rate_limiting import enforce_rate_limit

router = APIRouter(prefix="/api", dependencies=[Depends(enforce_rate_limit)])
router.include_router(catalog_router)
router.include_router(auth_router)
router.include_router(enquiry_router)
