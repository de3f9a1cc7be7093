# app/settings.py
import os

from dotenv import load_dotenv

load_dotenv()

DATABASE_URL = os.getenv(
    "DATABASE_URL",
    "postgresql+asyncpg://postgres:postgres@db:5432/storefront_db",
)
SQL_ECHO = os.getenv("SQL_ECHO", "0") == "1"

JWT_SECRET = os.getenv("JWT_SECRET", "supersecretkey")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

# catalog
PRODUCTS_PAGE_SIZE = int(os.getenv("PRODUCTS_PAGE_SIZE", "50"))
BULK_INSERT_BATCH_SIZE = int(os.getenv("BULK_INSERT_BATCH_SIZE", "100"))
DEFAULT_PRODUCT_STOCK = int(os.getenv("DEFAULT_PRODUCT_STOCK", "10"))

# used by the cart client and the demo scripts
API_BASE_URL = os.getenv("API_BASE_URL", "http://localhost:8000")
