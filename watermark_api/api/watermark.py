from typing import IO, Iterator
from urllib.parse import quote

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from fastapi.responses import StreamingResponse
from starlette.background import BackgroundTask
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import FormData, UploadFile
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.formparsers import MultiPartException

from watermark_api.core.config import Settings
from watermark_api.core.errors import (
    FILE_MUST_BE_PDF,
    INTERNAL_ERROR,
    INVALID_FORM_DATA,
    PDF_REQUIRED,
    PROCESSING_ERROR,
    READ_ERROR,
    TEXT_REQUIRED,
    WATERMARK_ERROR,
)
from watermark_api.core.logging import configure_logging
from watermark_api.models import ErrorResponse, WatermarkForm
from watermark_api.services.pdf_service import WatermarkError, WatermarkProcessor
from watermark_api.storage.local import ScratchSpace, ScratchStorage
from watermark_api.utils.file_utils import is_pdf_filename

router = APIRouter(prefix="/api", tags=["PDF Watermark"])

logger = configure_logging()

STREAM_CHUNK_SIZE = 64 * 1024
# هامش لحدود multipart وترويسات الأجزاء فوق حجم الملفات نفسها.
FORM_OVERHEAD_BYTES = 64 * 1024
CORS_ALLOW_METHODS = ["POST", "GET", "OPTIONS"]
CORS_ALLOW_HEADERS = ["Content-Type"]


# ============ Dependencies ============
def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_storage(request: Request) -> ScratchStorage:
    return request.app.state.storage


def get_processor(request: Request) -> WatermarkProcessor:
    return request.app.state.processor


# ============ Helpers ============
def cors_headers(settings: Settings) -> dict:
    origin = "*" if "*" in settings.allow_origins else ", ".join(settings.allow_origins)
    return {
        "Access-Control-Allow-Origin": origin,
        "Access-Control-Allow-Methods": ", ".join(CORS_ALLOW_METHODS),
        "Access-Control-Allow-Headers": ", ".join(CORS_ALLOW_HEADERS),
    }


def _bad_request(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


def _server_error(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail)


async def _read_form(request: Request, max_bytes: int) -> FormData:
    """قراءة جسم multipart مع رفض ما يتجاوز الحد الأعلى للحجم."""
    content_type = request.headers.get("content-type", "")
    if not content_type.lower().startswith("multipart/form-data"):
        logger.warning("نوع محتوى غير مدعوم لطلب العلامة المائية: %r", content_type)
        raise _bad_request(INVALID_FORM_DATA)

    declared = request.headers.get("content-length", "")
    if declared.isdigit() and int(declared) > max_bytes + FORM_OVERHEAD_BYTES:
        logger.warning("حجم الطلب %s يتجاوز الحد %s", declared, max_bytes)
        raise _bad_request(INVALID_FORM_DATA)

    try:
        form = await request.form()
    except (StarletteHTTPException, MultiPartException) as exc:
        logger.warning("فشل تحليل نموذج multipart: %s", getattr(exc, "detail", None) or exc)
        raise _bad_request(INVALID_FORM_DATA) from exc

    uploaded = sum(value.size or 0 for _, value in form.multi_items() if isinstance(value, UploadFile))
    if uploaded > max_bytes:
        await form.close()
        logger.warning("حجم الملفات المرفوعة %s يتجاوز الحد %s", uploaded, max_bytes)
        raise _bad_request(INVALID_FORM_DATA)

    return form


def _persist_upload(upload: UploadFile, scratch: ScratchSpace) -> None:
    try:
        target = scratch.open_input()
    except OSError as exc:
        logger.exception("تعذر إنشاء ملف الإدخال %s", scratch.input_path)
        raise _server_error(INTERNAL_ERROR) from exc

    try:
        scratch.copy_stream(upload.file, target)
    except OSError as exc:
        logger.exception("تعذر نسخ الملف المرفوع إلى %s", scratch.input_path)
        raise _server_error(PROCESSING_ERROR) from exc


def _apply_watermark(processor: WatermarkProcessor, scratch: ScratchSpace, text: str, style: str) -> None:
    try:
        processor.add_text_watermarks(
            scratch.input_path,
            scratch.output_path,
            [],
            True,
            text,
            style,
            None,
        )
    except WatermarkError as exc:
        logger.exception("فشل إضافة العلامة المائية إلى %s", scratch.input_path)
        raise _server_error(WATERMARK_ERROR) from exc


def _open_output(scratch: ScratchSpace) -> IO[bytes]:
    try:
        return scratch.open_output()
    except OSError as exc:
        logger.exception("تعذر فتح الملف الناتج %s", scratch.output_path)
        raise _server_error(READ_ERROR) from exc


def _stream_file(handle: IO[bytes], scratch: ScratchSpace) -> Iterator[bytes]:
    try:
        while True:
            chunk = handle.read(STREAM_CHUNK_SIZE)
            if not chunk:
                break
            yield chunk
    except OSError:
        # الترويسات أُرسلت بالفعل، فتبقى الاستجابة مبتورة.
        logger.exception("خطأ أثناء إرسال الملف الناتج %s", scratch.output_path)
    finally:
        handle.close()
        scratch.release()


def content_disposition(filename: str) -> str:
    name = f"watermarked_{filename}"
    try:
        name.encode("latin-1")
    except UnicodeEncodeError:
        return f"attachment; filename*=UTF-8''{quote(name)}"
    return f'attachment; filename="{name}"'


# ============ Endpoints ============
@router.options("/watermark", include_in_schema=False)
async def watermark_options(settings: Settings = Depends(get_app_settings)) -> Response:
    return Response(status_code=status.HTTP_200_OK, headers=cors_headers(settings))


@router.post(
    "/watermark",
    summary="إضافة علامة مائية نصية إلى ملف PDF وإرجاعه",
    response_class=StreamingResponse,
    responses={
        200: {"content": {"application/pdf": {}}},
        400: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
async def add_watermark(
    request: Request,
    settings: Settings = Depends(get_app_settings),
    storage: ScratchStorage = Depends(get_storage),
    processor: WatermarkProcessor = Depends(get_processor),
) -> StreamingResponse:
    """
    المراحل: تحليل النموذج، التحقق من الملف والنص، حفظ الملف في مجلد مؤقت خاص
    بالطلب، تطبيق العلامة المائية، ثم بث الناتج وحذف المجلد المؤقت في كل الحالات.
    """
    form = await _read_form(request, settings.max_upload_bytes)
    try:
        upload = form.get("pdf")
        if not isinstance(upload, UploadFile) or not upload.filename:
            raise _bad_request(PDF_REQUIRED)
        if not is_pdf_filename(upload.filename):
            raise _bad_request(FILE_MUST_BE_PDF)

        fields = WatermarkForm.from_form(form)
        if not fields.text:
            raise _bad_request(TEXT_REQUIRED)

        unused = fields.unused_fields()
        if unused:
            logger.debug("حقول مقبولة لا تدخل في المعالجة: %s", unused)

        try:
            storage.ensure_root()
            scratch = storage.acquire()
        except OSError as exc:
            logger.exception("تعذر تجهيز المجلد المؤقت %s", storage.root)
            raise _server_error(INTERNAL_ERROR) from exc

        try:
            await run_in_threadpool(_persist_upload, upload, scratch)
            await run_in_threadpool(_apply_watermark, processor, scratch, fields.text, settings.watermark_style)
            handle = await run_in_threadpool(_open_output, scratch)
        except BaseException:
            scratch.release()
            raise
    finally:
        await form.close()

    logger.info("تمت إضافة العلامة المائية إلى الملف %s", upload.filename)

    return StreamingResponse(
        _stream_file(handle, scratch),
        media_type="application/pdf",
        headers={**cors_headers(settings), "Content-Disposition": content_disposition(upload.filename)},
        background=BackgroundTask(scratch.release),
    )
