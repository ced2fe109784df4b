# marketplace/main.py
from contextlib import asynccontextmanager

from fastapi import FastAPI
import uvicorn

from marketplace.api import register_api
from marketplace.data.database import init_db
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Initializing database")
    try:
        init_db()
    except Exception as e:
        logger.error(f"Failed to create tables: {e}")
        raise
    yield


def create_app(init_database: bool = True) -> FastAPI:
    app = FastAPI(
        title="Marketplace",
        version="1.0.0",
        lifespan=lifespan if init_database else None,
    )

    register_api(app)

    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
