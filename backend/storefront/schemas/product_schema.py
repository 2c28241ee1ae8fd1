from typing import Annotated, Optional
from urllib.parse import urlsplit

from pydantic import AfterValidator, BaseModel, ConfigDict, Field


def check_image_ref(value: str) -> str:
    """Accept an absolute http(s) URL or a server path such as /uploads/<file>."""
    parts = urlsplit(value)
    if parts.scheme in ("http", "https") and parts.netloc:
        return value
    if not parts.scheme and not parts.netloc and value.startswith("/"):
        return value
    raise ValueError("must be an absolute http(s) URL or a path starting with '/'")


ImageRef = Annotated[str, AfterValidator(check_image_ref)]


class ProductCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True, extra="ignore")

    name: str = Field(min_length=1)
    description: str = Field(min_length=1)
    price: float = Field(ge=0, allow_inf_nan=False)
    category: str = Field(min_length=1)
    stock: Optional[int] = Field(None, ge=0)
    image_url: Optional[ImageRef] = Field(None, alias="imageUrl")


class ProductUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True, extra="ignore")

    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = Field(None, min_length=1)
    price: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    category: Optional[str] = Field(None, min_length=1)
    stock: Optional[int] = Field(None, ge=0)
    image_url: Optional[ImageRef] = Field(None, alias="imageUrl")


class ProductOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: str
    price: float
    category: str
    stock: Optional[int] = None
    image_url: Optional[str] = Field(None, serialization_alias="imageUrl")


def product_fields(payload: BaseModel) -> dict:
    """Column values for the fields the client actually sent."""
    return payload.model_dump(exclude_unset=True)


def product_to_dict(product) -> dict:
    return ProductOut.model_validate(product).model_dump(by_alias=True)
