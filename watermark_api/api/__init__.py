
from . import hello, watermark

hello_routers = [
    hello.router,
]

watermark_routers = [
    watermark.router,
]

__all__ = [
    "hello_routers",
    "watermark_routers",
]
