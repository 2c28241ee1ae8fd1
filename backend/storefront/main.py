import logging
import os
from contextlib import asynccontextmanager
from typing import Optional

from apscheduler.schedulers.background import BackgroundScheduler
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from storefront.api.health import router as health_router
from storefront.api.routes_auth import router as auth_router
from storefront.api.routes_catalogue import router as catalogue_router
from storefront.api.routes_users import router as users_router
from storefront.config import Settings, get_settings
from storefront.db import Database
from storefront.errors import register_exception_handlers
from storefront.services.upload_service import ImageStorage
from storefront.utils.log import configure_logging

log = logging.getLogger("storefront.main")


def _start_sweeper(app: FastAPI, settings: Settings) -> Optional[BackgroundScheduler]:
    if settings.ORPHAN_SWEEP_INTERVAL_SECONDS <= 0:
        return None

    storage = ImageStorage(settings)

    def sweep_job():
        db = app.state.database.SessionLocal()
        try:
            storage.sweep_orphans(db)
        except Exception:
            log.exception("Orphan upload sweep failed")
        finally:
            db.close()

    scheduler = BackgroundScheduler()
    scheduler.add_job(
        sweep_job,
        "interval",
        seconds=settings.ORPHAN_SWEEP_INTERVAL_SECONDS,
        id="sweep_orphan_uploads",
    )
    scheduler.start()
    return scheduler


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = app.state.settings
    os.makedirs(settings.UPLOAD_DIR, exist_ok=True)
    app.state.database.init_db()
    scheduler = _start_sweeper(app, settings)
    log.info("Storefront API started")
    try:
        yield
    finally:
        if scheduler is not None:
            scheduler.shutdown(wait=False)
        app.state.database.dispose()


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.LOG_LEVEL)

    app = FastAPI(title="Storefront API", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.database = Database(settings.DATABASE_URL)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.FRONTEND_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)

    app.include_router(health_router, tags=["health"])
    app.include_router(auth_router)
    app.include_router(catalogue_router, prefix="/products", tags=["catalogue"])
    app.include_router(users_router)

    # the directory is created on startup
    app.mount(
        settings.UPLOAD_URL_PREFIX,
        StaticFiles(directory=settings.UPLOAD_DIR, check_dir=False),
        name="uploads",
    )
    return app


app = create_app()
