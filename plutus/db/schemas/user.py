from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RegisterRequest(CamelModel):
    full_name: str = ""
    email: str = ""
    phone: str = ""
    password: str = ""


class LoginRequest(CamelModel):
    email: str = ""
    password: str = ""


class UserPublic(CamelModel):
    id: str
    full_name: str = ""
    email: str
    phone: str = ""

    @classmethod
    def from_user(cls, user) -> "UserPublic":
        return cls(
            id=user.user_id,
            full_name=user.full_name or "",
            email=user.email,
            phone=user.phone or "",
        )
