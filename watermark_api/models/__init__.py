
from .common import ErrorResponse, Message
from .watermark import WatermarkForm

__all__ = [
    "ErrorResponse",
    "Message",
    "WatermarkForm",
]
