# app/shop.py
from typing import Optional

from fastapi import APIRouter, Depends, Query

from .auth import get_account, get_optional_user
from .catalog import ProductCatalog
from .errors import Forbidden, ValidationFailed
from .schemas import BulkUploadRequest, ProductCreate, UserOut
from .settings import PRODUCTS_PAGE_SIZE
from .store import DataStore, get_store

router = APIRouter(prefix="/api/products", tags=["products"])


def get_catalog(store: DataStore = Depends(get_store)) -> ProductCatalog:
    return ProductCatalog(store)


@router.get("")
async def list_products(
    category: Optional[str] = None,
    limit: int = Query(PRODUCTS_PAGE_SIZE, ge=1),
    offset: int = Query(0, ge=0),
    catalog: ProductCatalog = Depends(get_catalog),
):
    products = await catalog.list_products(category, limit=limit, offset=offset)
    return {
        "success": True,
        "products": products,
        "total": len(products),
        "category": category or "all",
    }


@router.post("")
async def create_product(payload: ProductCreate, catalog: ProductCatalog = Depends(get_catalog)):
    product = await catalog.create_product(payload)
    return {"message": "Product created successfully", "product": product}


@router.post("/bulk-upload")
async def bulk_upload(
    payload: BulkUploadRequest,
    catalog: ProductCatalog = Depends(get_catalog),
    user: UserOut | None = Depends(get_optional_user),
):
    # a token wins over the body; either way the uploader must be a seller
    if user is not None:
        if user.role != "seller":
            raise Forbidden("User is not a seller. Please make sure you have a seller account.")
        seller_id = user.id
    else:
        if not payload.seller_id:
            raise ValidationFailed("Seller ID is required")
        if await get_account(catalog.store, payload.seller_id, "seller") is None:
            raise Forbidden("User is not a seller. Please make sure you have a seller account.")
        seller_id = payload.seller_id

    inserted = await catalog.bulk_upload(payload.products or [], seller_id)
    return {
        "message": "Products uploaded successfully",
        "count": len(inserted),
        "products": inserted,
        "seller_id": seller_id,
    }
