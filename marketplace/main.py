# marketplace/main.py
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from marketplace.api import create_app
from marketplace.data.database import init_db
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Initializing database...")
    init_db()
    logger.info("Database ready")
    yield


app = create_app(lifespan=lifespan)

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
