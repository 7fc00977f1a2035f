# eventhire/main.py
import logging

from fastapi import FastAPI

from eventhire.core.config import get_settings
from eventhire.core.errors import MarketplaceError, marketplace_error_handler
from eventhire.core.logging import configure_logging
from eventhire.db.base import Base, SessionLocal, engine
from eventhire.api.routes import auth
from eventhire.api.routes import admin as admin_router
from eventhire.api.routes import bookings as bookings_router
from eventhire.api.routes import ratings as ratings_router
from eventhire.api.routes import reference as reference_router
from eventhire.api.routes import vendors as vendors_router
from eventhire.api.routes import waiters as waiters_router
from eventhire.services.identity import seed_admin

settings = get_settings()
configure_logging(settings.log_level)
logger = logging.getLogger(__name__)

app = FastAPI(title="EventHire API")
app.add_exception_handler(MarketplaceError, marketplace_error_handler)


@app.on_event("startup")
def startup():
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        admin = seed_admin(db, settings)
        if admin:
            logger.info("Admin account ready: %s", admin.email)
    finally:
        db.close()


@app.get("/")
def root():
    return {"message": "EventHire API running"}


@app.get("/api/health")
def health():
    return {"status": "OK", "email_enabled": settings.email_enabled}


app.include_router(auth.router, prefix="/api/auth")
app.include_router(reference_router.router, prefix="/api")
app.include_router(vendors_router.router, prefix="/api")
app.include_router(waiters_router.router, prefix="/api")
app.include_router(bookings_router.router, prefix="/api")
app.include_router(ratings_router.router, prefix="/api")
app.include_router(admin_router.router, prefix="/api")
