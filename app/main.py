from fastapi import FastAPI

from app.api.routes import health
from app.api.v1 import v1_router
from app.core.config import settings
from app.core.db import engine
from app.core.logging_config import setup_logging
from app.infrastructure.db.base import Base
from app.infrastructure.db import models  # noqa: F401  registers tables on Base.metadata

setup_logging()

app = FastAPI(title=settings.APP_NAME, debug=settings.DEBUG)


@app.on_event("startup")
async def startup():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


app.include_router(health.router)
app.include_router(v1_router)
