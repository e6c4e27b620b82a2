from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Tuple

from reportlab.pdfbase.pdfmetrics import standardFonts

POSITIONS = {"tl", "tc", "tr", "l", "c", "r", "bl", "bc", "br"}

_KEYS = ("fontname", "points", "position", "offset", "fillcolor", "opacity", "rotation")


class StyleDescriptorError(ValueError):
    """وصف العلامة المائية غير صالح."""


@dataclass(frozen=True)
class WatermarkStyle:
    font_name: str = "Helvetica"
    font_size: float = 24
    position: str = "c"
    offset: Tuple[float, float] = (0.0, 0.0)
    fill_color: Tuple[float, float, float] = (0.5, 0.5, 0.5)
    opacity: float = 1.0
    rotation: float = 0.0

    @property
    def horizontal(self) -> str:
        if self.position.endswith("l"):
            return "left"
        if self.position.endswith("r"):
            return "right"
        return "center"

    @property
    def vertical(self) -> str:
        if self.position.startswith("t"):
            return "top"
        if self.position.startswith("b"):
            return "bottom"
        return "middle"


def _resolve_key(key: str) -> str:
    matches = [candidate for candidate in _KEYS if candidate.startswith(key)]
    if len(matches) != 1:
        raise StyleDescriptorError(f"مفتاح غير معروف أو ملتبس في وصف العلامة المائية: {key!r}")
    return matches[0]


def _parse_float(key: str, value: str, low: float | None = None, high: float | None = None) -> float:
    try:
        number = float(value)
    except ValueError as exc:
        raise StyleDescriptorError(f"قيمة غير رقمية للمفتاح {key}: {value!r}") from exc
    if (low is not None and number < low) or (high is not None and number > high):
        raise StyleDescriptorError(f"قيمة المفتاح {key} خارج المجال [{low}, {high}]: {value}")
    return number


def _parse_color(value: str) -> Tuple[float, float, float]:
    if value.startswith("#"):
        hex_value = value[1:]
        if len(hex_value) != 6:
            raise StyleDescriptorError(f"لون غير صالح: {value!r}")
        try:
            red, green, blue = (int(hex_value[i:i + 2], 16) for i in (0, 2, 4))
        except ValueError as exc:
            raise StyleDescriptorError(f"لون غير صالح: {value!r}") from exc
        return red / 255, green / 255, blue / 255

    parts = value.split()
    if len(parts) != 3:
        raise StyleDescriptorError(f"لون غير صالح: {value!r}")
    red, green, blue = (_parse_float("fillcolor", part, 0, 1) for part in parts)
    return red, green, blue


def parse_style_descriptor(description: str) -> WatermarkStyle:
    """
    تحليل وصف العلامة المائية المختصر إلى كائن WatermarkStyle.

    الصيغة: أزواج key:value مفصولة بفواصل، مثل
    "font:Helvetica, points:12, pos:bc, off:0 10, fillc:#808080, op:0.5, rot:0".
    يمكن اختصار أي مفتاح إلى بادئة غير ملتبسة.
    """
    values: Dict[str, object] = {}

    for pair in description.split(","):
        pair = pair.strip()
        if not pair:
            continue
        if ":" not in pair:
            raise StyleDescriptorError(f"زوج غير صالح في وصف العلامة المائية: {pair!r}")

        raw_key, raw_value = (part.strip() for part in pair.split(":", 1))
        key = _resolve_key(raw_key.lower())

        if key == "fontname":
            if raw_value not in standardFonts:
                raise StyleDescriptorError(f"خط غير مدعوم: {raw_value!r}")
            values["font_name"] = raw_value
        elif key == "points":
            values["font_size"] = _parse_float(key, raw_value, 1)
        elif key == "position":
            position = raw_value.lower()
            if position not in POSITIONS:
                raise StyleDescriptorError(f"موضع غير مدعوم: {raw_value!r}")
            values["position"] = position
        elif key == "offset":
            parts = raw_value.split()
            if len(parts) != 2:
                raise StyleDescriptorError(f"الإزاحة يجب أن تكون قيمتين: {raw_value!r}")
            values["offset"] = (_parse_float(key, parts[0]), _parse_float(key, parts[1]))
        elif key == "fillcolor":
            values["fill_color"] = _parse_color(raw_value)
        elif key == "opacity":
            values["opacity"] = _parse_float(key, raw_value, 0, 1)
        else:
            values["rotation"] = _parse_float(key, raw_value, -180, 180)

    return WatermarkStyle(**values)
