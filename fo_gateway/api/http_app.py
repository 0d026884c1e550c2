# ==============================
# FastAPI App Factory
# ==============================
from __future__ import annotations

from typing import Optional

from fastapi import FastAPI

from fo.config.schema import Settings
from fo.logging.logger import bootstrap_logger
from fo_gateway.api.deps import get_settings
from fo_gateway.api.routes_tools import router as tools_router


def create_app(settings: Optional[Settings] = None, *, configure_logging: bool = True) -> FastAPI:
    settings = settings or get_settings()
    if configure_logging:
        bootstrap_logger(settings)
    app = FastAPI(title="fo-tools", version="0.1.0", debug=settings.app.debug)
    app.include_router(tools_router, prefix=settings.app.tools_prefix)
    return app
