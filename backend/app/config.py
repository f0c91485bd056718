# app/config.py
import os
from pydantic import BaseModel
from dotenv import load_dotenv

load_dotenv()  # Load environment variables from .env file


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("true", "1", "yes")


class Settings(BaseModel):
    # General app settings
    APP_NAME: str = "Storefront Catalog API"
    env: str = os.getenv("ENV", "dev")

    # Host & Port settings
    host: str = os.getenv("HOST", "0.0.0.0")
    port: int = int(os.getenv("PORT", "8080"))

    # CORS origins for frontend
    CORS_ORIGINS: list[str] = [
        "http://localhost:5173",
        "http://127.0.0.1:5173",
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    # Database (Tortoise URL format)
    database_url: str = os.getenv("DATABASE_URL", "sqlite://db.sqlite3")
    # Create missing tables on startup; turn off once Aerich migrations own the schema
    generate_schemas: bool = _env_bool("GENERATE_SCHEMAS", "true")

    # Uploaded product images, served under /uploads
    upload_dir: str = os.getenv("UPLOAD_DIR", "uploads")
    max_upload_mb: int = int(os.getenv("MAX_UPLOAD_MB", "10"))

    # Brute-force protection for the public auth endpoints
    login_rate_limit: int = int(os.getenv("LOGIN_RATE_LIMIT", "5"))
    login_rate_window_minutes: int = int(os.getenv("LOGIN_RATE_WINDOW_MINUTES", "15"))
    register_rate_limit: int = int(os.getenv("REGISTER_RATE_LIMIT", "3"))
    register_rate_window_minutes: int = int(os.getenv("REGISTER_RATE_WINDOW_MINUTES", "60"))

    # Stripe (payment intents only)
    stripe_secret_key: str | None = os.getenv("STRIPE_SECRET_KEY")
    stripe_api_base: str = os.getenv("STRIPE_API_BASE", "https://api.stripe.com/v1")


settings = Settings()  # Instantiate configuration
