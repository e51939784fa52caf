from typing import Optional

from fastapi import APIRouter, HTTPException, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from plutus.core.dependencies import DBDependency
from plutus.core.responses import error_response, send_success
from plutus.core.security import generate_user_id, get_password_hash, verify_password
from plutus.db.models.user import User
from plutus.db.schemas.user import LoginRequest, RegisterRequest, UserPublic
from plutus.utils.logging import get_logger

router = APIRouter(prefix="/auth", tags=["Auth"])

INVALID_CREDENTIALS = "Invalid email or password"
ALREADY_REGISTERED = "You are already registered with this email."


async def get_user_by_email(db: AsyncSession, email: str) -> Optional[User]:
    result = await db.execute(select(User).where(User.email == email))
    return result.scalar_one_or_none()


@router.post("/register")
async def register(user_data: RegisterRequest, db: DBDependency):
    if not user_data.email or not user_data.password:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email and password are required",
        )

    if await get_user_by_email(db, user_data.email):
        return error_response(ALREADY_REGISTERED)

    new_user = User(
        user_id=generate_user_id(),
        full_name=user_data.full_name,
        email=user_data.email,
        phone=user_data.phone,
        password_hash=get_password_hash(user_data.password),
    )
    db.add(new_user)
    try:
        await db.commit()
    except IntegrityError:
        # A concurrent registration took the email after the lookup
        await db.rollback()
        get_logger().warning(f"Duplicate registration for {user_data.email}")
        return error_response(ALREADY_REGISTERED)

    return send_success(
        message="Account created successfully",
        data={"user": UserPublic.from_user(new_user).model_dump(by_alias=True)},
    )


@router.post("/login")
async def login(form_data: LoginRequest, db: DBDependency):
    if not form_data.email or not form_data.password:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email and password are required",
        )

    db_user = await get_user_by_email(db, form_data.email)
    if not db_user or not verify_password(form_data.password, db_user.password_hash):
        return error_response(INVALID_CREDENTIALS, status.HTTP_401_UNAUTHORIZED)

    return send_success(
        message="Successfully signed in",
        data={"user": UserPublic.from_user(db_user).model_dump(by_alias=True)},
    )
