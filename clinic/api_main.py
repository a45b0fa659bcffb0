from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text

from . import api_admin, api_public
from .config import CORS_ORIGINS
from .db import db_session, init_db
from .log import setup_logging


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Create tables (idempotent)
    init_db()
    yield


def create_app() -> FastAPI:
    setup_logging()

    app = FastAPI(title="Therapy Clinic API", version="1.0.0", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_admin.router)
    app.include_router(api_public.router)

    @app.get("/health")
    def health() -> dict[str, Any]:
        return {"ok": True}

    @app.get("/db-health")
    def db_health() -> dict[str, Any]:
        with db_session() as s:
            result = s.execute(text("SELECT 1")).scalar_one()
        return {"db": "ok", "result": result}

    return app


app = create_app()
