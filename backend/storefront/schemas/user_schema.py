from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from storefront.rbac import Role


class RegisterIn(BaseModel):
    name: str = Field(min_length=1)
    email: EmailStr
    password: str = Field(min_length=1)
    role: Role = Role.USER


class LoginIn(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)


class UserUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=1)
    role: Optional[Role] = None


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    role: Role


class TokenOut(BaseModel):
    token: str
    token_type: str = Field("bearer", serialization_alias="tokenType")
    expires_in: int = Field(serialization_alias="expiresIn")


def user_to_dict(user) -> dict:
    return UserOut.model_validate(user).model_dump(mode="json")
