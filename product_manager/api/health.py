from fastapi import APIRouter, Depends
from sqlalchemy import text

from product_manager.api.deps import get_controller
from product_manager.db import engine
from product_manager.services.controller import AppController

router = APIRouter()


@router.get("/health", tags=["health"])
def health(controller: AppController = Depends(get_controller)):
    storage_ok = False
    ai_ok = False
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
            storage_ok = True
    except Exception:
        storage_ok = False
    try:
        ai_ok = controller.content.health_check()
    except Exception:
        ai_ok = False

    return {
        "status": "ok" if storage_ok and ai_ok and controller.store.loaded else "degraded",
        "storage": storage_ok,
        "store_loaded": controller.store.loaded,
        "ai_adapter": ai_ok,
    }
