# watermark_api/main.py
from __future__ import annotations

from typing import Optional

import uvicorn
from fastapi import FastAPI

from watermark_api.api import hello_routers, watermark_routers
from watermark_api.api.watermark import cors_headers
from watermark_api.core.config import Settings, get_settings
from watermark_api.core.errors import register_exception_handlers
from watermark_api.core.logging import configure_logging
from watermark_api.services.pdf_service import WatermarkProcessor
from watermark_api.storage.local import ScratchStorage


def _build_app(settings: Settings, title: str, routers: list) -> FastAPI:
    app = FastAPI(title=title, version=settings.app_version)
    app.state.settings = settings
    register_exception_handlers(app)
    for router in routers:
        app.include_router(router)
    return app


def create_hello_app(settings: Optional[Settings] = None) -> FastAPI:
    """خدمة الترحيب: نقطة نهاية واحدة GET /api/hello."""
    settings = settings or get_settings()
    return _build_app(settings, f"{settings.app_name} - Hello", hello_routers)


def create_watermark_app(
    settings: Optional[Settings] = None,
    storage: Optional[ScratchStorage] = None,
    processor: Optional[WatermarkProcessor] = None,
) -> FastAPI:
    """خدمة العلامة المائية: POST /api/watermark مع دعم CORS."""
    settings = settings or get_settings()
    if settings.scratch_dir is None:
        settings.configure_paths()

    app = _build_app(settings, settings.app_name, watermark_routers)
    app.state.storage = storage or ScratchStorage(settings.scratch_dir)
    app.state.processor = processor or WatermarkProcessor()

    # === CORS ===
    # ترويسات ثابتة على كل استجابة؛ طلبات OPTIONS كلها تصل إلى المسار نفسه وتُجاب بـ 200.
    app.state.cors_headers = cors_headers(settings)
    return app


def _serve(app: FastAPI, settings: Settings, endpoint: str) -> None:
    logger = configure_logging(settings)
    logger.info("🚀 Server running on http://localhost:%s", settings.port)
    logger.info("📄 Endpoint available at: %s", endpoint)
    uvicorn.run(app, host=settings.host, port=settings.port)


def run_hello() -> None:
    settings = get_settings()
    _serve(create_hello_app(settings), settings, "GET /api/hello")


def run_watermark() -> None:
    settings = get_settings()
    _serve(create_watermark_app(settings), settings, "POST /api/watermark")
