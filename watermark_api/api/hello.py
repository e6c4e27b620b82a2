from fastapi import APIRouter

from watermark_api.core.logging import configure_logging
from watermark_api.models import Message

router = APIRouter(prefix="/api", tags=["Greeting"])

logger = configure_logging()

GREETING = "Hello world! 👋"


@router.api_route(
    "/hello",
    methods=["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    response_model=Message,
    summary="رسالة ترحيب ثابتة",
)
async def hello() -> Message:
    logger.debug("Hello endpoint accessed")
    return Message(text=GREETING)
