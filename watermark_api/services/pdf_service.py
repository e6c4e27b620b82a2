from __future__ import annotations

from io import BytesIO
from pathlib import Path
from typing import Dict, Mapping, Optional, Sequence, Tuple

from pypdf import PdfReader, PdfWriter
from reportlab.lib.colors import Color
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfgen import canvas

from watermark_api.services.watermark_style import WatermarkStyle, parse_style_descriptor
from watermark_api.utils.file_utils import parse_page_selection


class WatermarkError(Exception):
    """فشل معالج المستندات في إنتاج الملف الناتج."""


class WatermarkProcessor:
    """إضافة علامات مائية نصية إلى ملفات PDF باستخدام pypdf وReportLab."""

    def add_text_watermarks(
        self,
        input_path: Path,
        output_path: Path,
        pages: Sequence[str],
        on_top: bool,
        text: str,
        description: str,
        metadata: Optional[Mapping[str, str]] = None,
    ) -> None:
        """
        كتابة نسخة من input_path إلى output_path مع العلامة المائية على الصفحات المختارة.

        Args:
            pages: تعابير اختيار الصفحات؛ القائمة الفارغة تعني كل الصفحات.
            on_top: True لرسم النص فوق محتوى الصفحة، False لوضعه تحته.
            description: وصف الخط والموضع واللون والشفافية والدوران.
            metadata: قيم اختيارية تُكتب في معلومات المستند.

        Raises:
            WatermarkError: عند أي فشل في القراءة أو التحليل أو الكتابة.
        """
        if not text:
            raise WatermarkError("نص العلامة المائية فارغ.")

        try:
            style = parse_style_descriptor(description)
            reader = PdfReader(str(input_path))
            if reader.is_encrypted:
                raise WatermarkError("الملف مشفر ولا يمكن إضافة علامة مائية إليه.")

            selected = set(parse_page_selection(pages, len(reader.pages)))
            if not selected:
                raise WatermarkError("اختيار الصفحات لا يطابق أي صفحة في المستند.")

            writer = PdfWriter()
            overlays: Dict[Tuple[float, float, float, float], PdfReader] = {}

            for number, page in enumerate(reader.pages, start=1):
                if number in selected:
                    box = page.mediabox
                    key = (float(box.left), float(box.bottom), float(box.width), float(box.height))
                    if key not in overlays:
                        overlays[key] = self._create_watermark_page(key, text, style)
                    page.merge_page(overlays[key].pages[0], over=on_top)
                writer.add_page(page)

            if reader.metadata:
                writer.add_metadata({key: str(reader.metadata[key]) for key in reader.metadata})
            if metadata:
                writer.add_metadata({self._metadata_key(k): v for k, v in metadata.items()})

            with Path(output_path).open("wb") as handle:
                writer.write(handle)
        except WatermarkError:
            raise
        except Exception as exc:  # pypdf قد يرفع أنواعًا متعددة مع الملفات التالفة
            raise WatermarkError(f"{type(exc).__name__}: {exc}") from exc

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    @staticmethod
    def _metadata_key(key: str) -> str:
        return key if key.startswith("/") else f"/{key}"

    @staticmethod
    def _create_watermark_page(
        box: Tuple[float, float, float, float],
        text: str,
        style: WatermarkStyle,
    ) -> PdfReader:
        left, bottom, width, height = box
        packet = BytesIO()
        c = canvas.Canvas(packet, pagesize=(left + width, bottom + height))

        c.setFillAlpha(style.opacity)
        red, green, blue = style.fill_color
        c.setFillColor(Color(red, green, blue, alpha=style.opacity))
        c.setFont(style.font_name, style.font_size)

        x, y = WatermarkProcessor._anchor(box, text, style)
        c.saveState()
        c.translate(x, y)
        c.rotate(style.rotation)
        c.drawCentredString(0, 0, text)
        c.restoreState()

        c.save()
        packet.seek(0)
        return PdfReader(packet)

    @staticmethod
    def _anchor(
        box: Tuple[float, float, float, float],
        text: str,
        style: WatermarkStyle,
    ) -> Tuple[float, float]:
        """حساب نقطة ارتكاز النص (منتصف خط الأساس) وفق الموضع والإزاحة."""
        left, bottom, width, height = box
        text_width = stringWidth(text, style.font_name, style.font_size)
        dx, dy = style.offset

        if style.horizontal == "left":
            x = left + text_width / 2
        elif style.horizontal == "right":
            x = left + width - text_width / 2
        else:
            x = left + width / 2

        if style.vertical == "bottom":
            y = bottom
        elif style.vertical == "top":
            y = bottom + height - style.font_size
        else:
            y = bottom + height / 2 - style.font_size / 2

        return x + dx, y + dy
