from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from product_manager.api.health import router as health_router
from product_manager.api.routes_catalogue import router as catalogue_router
from product_manager.api.routes_commands import router as commands_router
from product_manager.config import settings
from product_manager.db import init_db
from product_manager.repositories.product_repo import ProductStore
from product_manager.services.content_service import ContentService, build_text_adapter
from product_manager.services.controller import AppController
from product_manager.utils.logs import get_logger

log = get_logger("app", "APP")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # startup: a missing credential raises ConfigurationError and the app never serves
    adapter = build_text_adapter(settings)
    init_db()

    store = ProductStore()
    store.load()
    app.state.controller = AppController(store, ContentService(adapter))
    log.info("Started with %d products, AI provider '%s'.", len(store.products), adapter.name)

    yield


app = FastAPI(title="Product AI Manager", version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.FRONTEND_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health_router, prefix="/api", tags=["health"])

app.include_router(catalogue_router, prefix="/api/products", tags=["catalogue"])

app.include_router(commands_router, prefix="/api", tags=["commands"])


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("product_manager.main:app", host=settings.APP_HOST, port=settings.APP_PORT, log_level="info")
