from __future__ import annotations

import shutil
import time
from pathlib import Path
from typing import IO, Optional
from uuid import uuid4

from watermark_api.core.config import get_settings

SCRATCH_DIR_MODE = 0o755


class ScratchSpace:
    """مجلد مؤقت خاص بطلب واحد يحتوي ملف الإدخال وملف الإخراج."""

    def __init__(self, directory: Path) -> None:
        self.directory = directory
        self.input_path = directory / "input.pdf"
        self.output_path = directory / "output.pdf"
        self._released = False

    def open_input(self) -> IO[bytes]:
        return self.input_path.open("xb")

    def open_output(self) -> IO[bytes]:
        return self.output_path.open("rb")

    @staticmethod
    def copy_stream(source: IO[bytes], target: IO[bytes]) -> None:
        source.seek(0)
        with target:
            shutil.copyfileobj(source, target)

    def release(self) -> None:
        """حذف المجلد المؤقت بكامل محتواه؛ الاستدعاءات اللاحقة لا تفعل شيئًا."""
        if self._released:
            return
        self._released = True
        shutil.rmtree(self.directory, ignore_errors=True)


class ScratchStorage:
    """إدارة مجلد الملفات المؤقتة المشترك بين الطلبات."""

    def __init__(self, root: Optional[Path] = None) -> None:
        self.root = Path(root or get_settings().scratch_dir)

    def ensure_root(self) -> None:
        self.root.mkdir(mode=SCRATCH_DIR_MODE, parents=True, exist_ok=True)

    @staticmethod
    def _generate_name() -> str:
        return f"{int(time.time())}_{uuid4().hex}"

    def acquire(self) -> ScratchSpace:
        directory = self.root / self._generate_name()
        directory.mkdir(mode=SCRATCH_DIR_MODE)
        return ScratchSpace(directory)
