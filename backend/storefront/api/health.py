import os

from fastapi import APIRouter, Request

router = APIRouter()


@router.get("/health", tags=["health"])
def health(request: Request):
    db_ok = request.app.state.database.ping()
    upload_dir = request.app.state.settings.UPLOAD_DIR
    uploads_ok = os.path.isdir(upload_dir) and os.access(upload_dir, os.W_OK)

    return {
        "status": "ok" if db_ok and uploads_ok else "degraded",
        "db": db_ok,
        "uploads": uploads_ok,
    }
