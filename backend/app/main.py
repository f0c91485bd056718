# app/main.py
import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from app.config import settings
from app.core.db import init_db, close_db
from app.core.bootstrap import ensure_default_plans
from app.core.errors import register_exception_handlers
from app.core.rate_limiter import FixedWindowRateLimiter
from app.services.payments import StripePaymentGateway
from app.services.storage import LocalImageStorage

from app.api.v1.routers import auth, collections, products, catalogs, plans

logger = logging.getLogger("uvicorn.error")

app = FastAPI(title=settings.APP_NAME)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Swappable collaborators; routes reach them through app.api.v1.deps
app.state.login_limiter = FixedWindowRateLimiter(
    settings.login_rate_limit, settings.login_rate_window_minutes * 60, name="login-limit"
)
app.state.register_limiter = FixedWindowRateLimiter(
    settings.register_rate_limit, settings.register_rate_window_minutes * 60, name="register-limit"
)
app.state.image_storage = LocalImageStorage(
    settings.upload_dir, url_prefix="/uploads", max_bytes=settings.max_upload_mb * 1024 * 1024
)
app.state.payment_gateway = StripePaymentGateway()

@app.on_event("startup")
async def on_startup():
    await init_db()
    # Plans table always mirrors the built-in catalog
    await ensure_default_plans()
    await app.state.login_limiter.start()
    await app.state.register_limiter.start()
    if not app.state.payment_gateway.is_available():
        logger.warning("[payments] STRIPE_SECRET_KEY not set -> payment intents disabled")

@app.on_event("shutdown")
async def on_shutdown():
    await app.state.login_limiter.stop()
    await app.state.register_limiter.stop()
    await close_db()

# REST
app.include_router(auth.router)
app.include_router(collections.router)
app.include_router(products.router)
app.include_router(catalogs.router)
app.include_router(plans.router)

# Uploaded product images
os.makedirs(settings.upload_dir, exist_ok=True)
app.mount("/uploads", StaticFiles(directory=settings.upload_dir), name="uploads")

@app.get("/healthz")
def healthz():
    return {"ok": True}
