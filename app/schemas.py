# app/schemas.py
import re
from typing import Annotated, List, Literal, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, EmailStr, Field, model_validator

PASSWORD_RULE = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)")


def check_password(value: str) -> str:
    if len(value) < 8:
        raise ValueError("Password must be at least 8 characters")
    if not PASSWORD_RULE.match(value):
        raise ValueError(
            "Password must contain at least one uppercase letter, one lowercase letter, and one number"
        )
    return value


Password = Annotated[str, AfterValidator(check_password)]


# 👤 Accounts
class BuyerSignUp(BaseModel):
    name: str = Field(min_length=2)
    email: EmailStr
    password: Password
    confirm_password: str
    phone: Optional[str] = None

    @model_validator(mode="after")
    def passwords_match(self):
        if self.password != self.confirm_password:
            raise ValueError("Passwords don't match")
        return self


class SellerSignUp(BaseModel):
    name: str = Field(min_length=2)
    store_name: str = Field(min_length=2)
    gst_number: str = Field(min_length=1)
    business_type: str = Field(min_length=1)
    business_address: str = Field(min_length=10)
    email: EmailStr
    phone: str = Field(min_length=10)
    password: Password
    confirm_password: str

    @model_validator(mode="after")
    def passwords_match(self):
        if self.password != self.confirm_password:
            raise ValueError("Passwords don't match")
        return self


class SignIn(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)


class UserOut(BaseModel):
    id: str
    email: str
    name: str
    role: str
    phone: Optional[str] = None
    store_name: Optional[str] = None


class TokenOut(BaseModel):
    access_token: str
    token_type: str = "bearer"
    role: str
    user: UserOut


# 🛍️ Products
class ProductCreate(BaseModel):
    # validated by the catalog so that missing fields produce one 400 message
    name: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    price: Optional[float] = None
    stock: Optional[int] = None
    image_url: Optional[str] = None
    seller_id: Optional[str] = None


class BulkProductRow(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    price: Optional[float] = None
    stock: Optional[int] = None
    image_url: Optional[str] = None


class BulkUploadRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    products: Optional[List[BulkProductRow]] = None
    seller_id: Optional[str] = Field(default=None, alias="sellerId")


# 🛒 Cart
class ProductSnapshot(BaseModel):
    """Product fields copied onto a cart row when it is created."""
    model_config = ConfigDict(extra="ignore")

    name: Optional[str] = None
    description: Optional[str] = None
    price: float = 0.0
    image_url: Optional[str] = None
    category: Optional[str] = None
    seller_id: Optional[str] = None

    def to_cart_columns(self) -> dict:
        return {
            "product_name": self.name,
            "product_description": self.description,
            "product_price": self.price,
            "product_image": self.image_url,
            "product_category": self.category,
            "seller_id": self.seller_id,
        }

    @classmethod
    def from_cart_row(cls, row: dict) -> "ProductSnapshot":
        return cls(
            name=row.get("product_name"),
            description=row.get("product_description"),
            price=row.get("product_price") or 0.0,
            image_url=row.get("product_image"),
            category=row.get("product_category"),
            seller_id=row.get("seller_id"),
        )


class LocalCartEntry(ProductSnapshot):
    """A cart line held client-side before sign-in, keyed by product_id."""
    product_id: int
    quantity: int = Field(default=1, gt=0)

    def snapshot(self) -> ProductSnapshot:
        return ProductSnapshot(**self.model_dump(include=set(ProductSnapshot.model_fields)))


class MergedCartEntry(LocalCartEntry):
    backend_id: Optional[int] = None

    @classmethod
    def from_cart_row(cls, row: dict) -> "MergedCartEntry":
        return cls(
            product_id=row["product_id"],
            quantity=row["quantity"],
            backend_id=row.get("id"),
            **ProductSnapshot.from_cart_row(row).model_dump(),
        )


class CartAddRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: Optional[str] = Field(default=None, alias="userId")
    product_id: Optional[int] = Field(default=None, alias="productId")
    quantity: int = 1
    product_data: Optional[ProductSnapshot] = Field(default=None, alias="productData")
    # "replace" overwrites the stored quantity instead of adding to it (cart sync)
    mode: Literal["add", "replace"] = "add"


class CartUpdateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    cart_item_id: Optional[int] = Field(default=None, alias="cartItemId")
    quantity: Optional[int] = None


class CartClearRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: Optional[str] = Field(default=None, alias="userId")
