from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .logging import configure_logging

logger = configure_logging()

INVALID_FORM_DATA = "Invalid form data"
PDF_REQUIRED = "PDF file is required"
FILE_MUST_BE_PDF = "File must be a PDF"
TEXT_REQUIRED = "Text parameter is required"
INTERNAL_ERROR = "Internal server error"
PROCESSING_ERROR = "Error processing file"
WATERMARK_ERROR = "Error adding watermark to PDF"
READ_ERROR = "Error reading processed file"


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """تحويل أي HTTPException إلى جسم JSON بالشكل {"error": "..."}."""
    if exc.status_code >= 500:
        logger.error("HTTP %s على %s %s: %s", exc.status_code, request.method, request.url.path, exc.detail)
    else:
        logger.warning("HTTP %s على %s %s: %s", exc.status_code, request.method, request.url.path, exc.detail)

    # خدمة العلامة المائية تضيف ترويسات CORS إلى كل استجابة، بما فيها الأخطاء.
    headers = dict(getattr(request.app.state, "cors_headers", None) or {})
    headers.update(getattr(exc, "headers", None) or {})

    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=headers or None,
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
