from typing import List, Sequence, Set, Tuple


def is_pdf_filename(filename: str | None) -> bool:
    """التحقق من أن اسم الملف ينتهي بالامتداد .pdf بغض النظر عن حالة الأحرف."""
    return bool(filename) and filename.lower().endswith(".pdf")


def _parse_range(segment: str, total_pages: int) -> Tuple[int, int]:
    if "-" in segment:
        start_str, end_str = segment.split("-", 1)
        start = int(start_str) if start_str else 1
        end = int(end_str) if end_str else total_pages
    else:
        start = end = int(segment)

    if start < 1 or start > end:
        raise ValueError(f"نطاق الصفحات غير صالح: {segment}")
    return start, end


def parse_page_selection(selection: Sequence[str], total_pages: int) -> List[int]:
    """
    تحويل تعابير اختيار الصفحات (مثل 1-3، 5، 7-، even، !2) إلى قائمة أرقام صفحات مرتبة.

    القائمة الفارغة تعني كل الصفحات. البادئة ! تستثني الصفحات المطابقة،
    والصفحات خارج حدود المستند تُتجاهل.
    """
    included: Set[int] = set()
    excluded: Set[int] = set()
    has_inclusions = False

    for raw in selection:
        for segment in (part.strip() for part in raw.split(",")):
            if not segment:
                continue

            negate = segment.startswith("!")
            if negate:
                segment = segment[1:].strip()

            keyword = segment.lower()
            if keyword == "even":
                pages = set(range(2, total_pages + 1, 2))
            elif keyword == "odd":
                pages = set(range(1, total_pages + 1, 2))
            else:
                try:
                    start, end = _parse_range(segment, total_pages)
                except ValueError as exc:
                    raise ValueError(f"تعبير اختيار الصفحات غير صالح: {raw}") from exc
                pages = set(range(start, min(end, total_pages) + 1))

            if negate:
                excluded |= pages
            else:
                has_inclusions = True
                included |= pages

    if not has_inclusions:
        included = set(range(1, total_pages + 1))

    return sorted(included - excluded)
