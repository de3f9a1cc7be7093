# app/health.py
from fastapi import APIRouter, Depends

from .errors import BackendError
from .store import DataStore, StoreError, get_store

router = APIRouter(tags=["health"])


@router.get("/health")
async def health():
    return {"status": "ok"}


@router.get("/api/health/db")
async def database_health(store: DataStore = Depends(get_store)):
    try:
        products = await store.ping()
    except StoreError as e:
        raise BackendError("Database check failed", details=str(e))
    return {"success": True, "message": "Database connection successful", "products": products}
