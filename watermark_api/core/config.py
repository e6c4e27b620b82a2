from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_WATERMARK_STYLE = "font:Helvetica, points:12, pos:bc, off:0 10, fillc:#808080, op:0.5, rot:0"


class Settings(BaseSettings):
    """إعدادات الخدمتين مع تحميل القيم من ملف .env عند توفره."""

    model_config = SettingsConfigDict(
        env_file=Path(__file__).resolve().parents[2] / ".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "PDF Watermark API"
    app_version: str = "0.1.0"

    host: str = "0.0.0.0"
    port: int = 1234

    base_dir: Path = Field(default_factory=lambda: Path.cwd())
    scratch_dir: Optional[Path] = None

    max_upload_bytes: int = Field(10 << 20, gt=0, description="الحد الأعلى لحجم طلب multipart.")
    watermark_style: str = DEFAULT_WATERMARK_STYLE

    allow_origins: list[str] = Field(default_factory=lambda: ["*"])
    log_level: str = "INFO"

    def configure_paths(self) -> None:
        """تهيئة المسار الافتراضي لمجلد الملفات المؤقتة دون إنشائه."""
        # المجلد يُنشأ عند كل طلب، لذلك نكتفي هنا بتحديد المسار.
        self.scratch_dir = Path(self.scratch_dir or (self.base_dir / "tmp")).resolve()


@lru_cache()
def get_settings() -> Settings:
    settings = Settings()
    settings.configure_paths()
    return settings
