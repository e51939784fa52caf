from fastapi import APIRouter, HTTPException, status
from sqlalchemy.exc import SQLAlchemyError

from plutus.core.dependencies import DBDependency
from plutus.core.responses import send_success
from plutus.db.models.enquiry import Enquiry
from plutus.db.schemas.enquiry import EnquiryRequest
from plutus.utils.logging import get_logger

router = APIRouter(tags=["Enquiry"])


@router.post("/enquiry")
async def submit_enquiry(enquiry: EnquiryRequest, db: DBDependency):
    if not enquiry.name or not enquiry.email or not enquiry.message:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Name, email and message are required",
        )

    db.add(Enquiry(**enquiry.model_dump()))
    try:
        await db.commit()
    except SQLAlchemyError as exc:
        await db.rollback()
        get_logger().error(f"Failed to save enquiry: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to save enquiry",
        )

    return send_success(message="Enquiry submitted successfully")
