import importlib
import logging

from fastapi import Request
from sqlalchemy import create_engine, text
from sqlalchemy.orm import declarative_base, sessionmaker

log = logging.getLogger("storefront.db")

Base = declarative_base()

# largest value a 64-bit signed INTEGER column or OFFSET accepts
MAX_ROW_ID = 2**63 - 1

# model modules that must be imported so Base.metadata knows every table
MODEL_MODULES = [
    "storefront.models.product",
    "storefront.models.user",
]


class Database:
    def __init__(self, url: str, echo: bool = False):
        connect_args = {}
        if url.startswith("sqlite"):
            # sessions are used from FastAPI's worker threads
            connect_args["check_same_thread"] = False
        self.url = url
        self.engine = create_engine(url, future=True, echo=echo, connect_args=connect_args)
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

    def init_db(self, reset: bool = False):
        """
        Create the schema.

        With reset=True every table is dropped first, which gives tests and the
        seeding script a clean database.
        """
        for mod in MODEL_MODULES:
            importlib.import_module(mod)

        if reset:
            log.info("Resetting database %s", self.url)
            Base.metadata.drop_all(bind=self.engine)
        Base.metadata.create_all(bind=self.engine)
        log.info("Database initialized")

    def ping(self) -> bool:
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except Exception:
            log.warning("Database ping failed", exc_info=True)
            return False

    def dispose(self):
        self.engine.dispose()


def get_db(request: Request):
    db = request.app.state.database.SessionLocal()
    try:
        yield db
    finally:
        db.close()
