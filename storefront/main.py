# storefront/main.py
from contextlib import asynccontextmanager

from fastapi import FastAPI
import uvicorn

from storefront.api import include_routers
from storefront.data import database
from storefront.utils.logging import get_logger

# IMPORT WSZYSTKICH MODELI PRZED CREATE_ALL
import storefront.data.models  # noqa: F401

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # entry point jest wlascicielem polaczenia z baza, nie serwisy
    engine = database.init_db()
    logger.info(f"Models registered in Base.metadata: {list(database.Base.metadata.tables.keys())}")

    try:
        database.Base.metadata.create_all(bind=engine)
        logger.info("Database tables created")
    except Exception as e:
        logger.error(f"Failed to create tables: {e}")
        raise

    yield

    engine.dispose()


def create_app() -> FastAPI:
    app = FastAPI(
        title="Storefront Fulfillment Service",
        version="1.0.0",
        lifespan=lifespan,
    )
    return include_routers(app)


app = create_app()

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
