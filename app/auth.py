# app/auth.py
import logging

from fastapi import APIRouter, Depends, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .errors import AuthenticationFailed, BackendError, ValidationFailed
from .schemas import BuyerSignUp, SellerSignUp, SignIn, TokenOut, UserOut
from .security import create_access_token, decode_access_token, get_password_hash, verify_password
from .store import DataStore, StoreError, get_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])

# role -> table holding that kind of account; login checks them in this order
ACCOUNT_TABLES = {"buyer": "buyers", "seller": "sellers"}

bearer_scheme = HTTPBearer(auto_error=False)


def to_user_out(row: dict, role: str) -> UserOut:
    return UserOut(
        id=row["id"],
        email=row["email"],
        name=row["name"],
        role=role,
        phone=row.get("phone"),
        store_name=row.get("store_name"),
    )


async def find_account(store: DataStore, email: str) -> tuple[str, dict] | tuple[None, None]:
    email = email.lower().strip()
    try:
        for role, table in ACCOUNT_TABLES.items():
            row = await store.select_one(table, {"email": email})
            if row:
                return role, row
    except StoreError as e:
        raise BackendError("Database error. Please try again.", details=str(e))
    return None, None


async def get_account(store: DataStore, user_id: str, role: str) -> dict | None:
    table = ACCOUNT_TABLES.get(role)
    if table is None:
        return None
    try:
        return await store.select_one(table, {"id": user_id})
    except StoreError as e:
        raise BackendError("Database error. Please try again.", details=str(e))


async def create_account(store: DataStore, role: str, values: dict) -> UserOut:
    role_found, _ = await find_account(store, values["email"])
    if role_found:
        raise ValidationFailed("An account with this email already exists")

    values = dict(values)
    values["email"] = values["email"].lower().strip()
    values["password_hash"] = get_password_hash(values.pop("password"))
    values.pop("confirm_password", None)
    try:
        row = await store.insert_one(ACCOUNT_TABLES[role], values)
    except StoreError as e:
        raise BackendError("Failed to create account", details=str(e))
    logger.info("Registered %s %s", role, row["id"])
    return to_user_out(row, role)


@router.post("/buyers/register", response_model=UserOut, status_code=status.HTTP_201_CREATED)
async def register_buyer(payload: BuyerSignUp, store: DataStore = Depends(get_store)):
    return await create_account(store, "buyer", payload.model_dump())


@router.post("/sellers/register", response_model=UserOut, status_code=status.HTTP_201_CREATED)
async def register_seller(payload: SellerSignUp, store: DataStore = Depends(get_store)):
    return await create_account(store, "seller", payload.model_dump())


@router.post("/login", response_model=TokenOut)
async def login(payload: SignIn, store: DataStore = Depends(get_store)):
    role, row = await find_account(store, payload.email)
    if not row or not verify_password(payload.password, row["password_hash"]):
        raise AuthenticationFailed("Invalid email or password")

    return TokenOut(
        access_token=create_access_token(row["id"], role),
        role=role,
        user=to_user_out(row, role),
    )


async def get_optional_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    store: DataStore = Depends(get_store),
) -> UserOut | None:
    """Resolve the bearer token if one was sent; None when there is no token."""
    if credentials is None:
        return None

    payload = decode_access_token(credentials.credentials)
    if not payload or not payload.get("sub"):
        raise AuthenticationFailed("Invalid or expired token")

    role = payload.get("role")
    row = await get_account(store, payload["sub"], role)
    if row is None:
        raise AuthenticationFailed("User not found")
    return to_user_out(row, role)


async def get_current_user(user: UserOut | None = Depends(get_optional_user)) -> UserOut:
    if user is None:
        raise AuthenticationFailed("No authorization token provided")
    return user


@router.get("/me", response_model=UserOut)
async def get_me(current_user: UserOut = Depends(get_current_user)):
    return current_user
