import importlib

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from product_manager.config import settings
from product_manager.utils.logs import get_logger

log = get_logger("db", "DB")

DATABASE_URL = settings.DATABASE_URL
engine = create_engine(
    DATABASE_URL,
    future=True,
    echo=False,
    connect_args={"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {},
)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()

# add new model modules here so their tables are registered on Base.metadata
MODEL_MODULES = [
    "product_manager.models.storage_entry",
]


def init_db(reset: bool = False):
    """
    Initialize DB schema.

    Behavior:
      - Import every model module so metadata is populated.
      - If ``reset`` is set, drop & recreate tables (used by tests and the
        seed script to start from an empty storage slot).
      - Otherwise leave existing tables and their rows in place.
    """
    for mod in MODEL_MODULES:
        importlib.import_module(mod)

    if reset:
        log.info("Resetting database...")
        Base.metadata.drop_all(bind=engine)

    Base.metadata.create_all(bind=engine)
    log.info("Database initialized (%s).", DATABASE_URL)
