"""
Handles portfolio image uploads.

Responsibilities:
- Expose one upload endpoint (and a batch variant) per page/section
- Expose the generic endpoint that takes page/section as form fields
- Apply upload rate limiting per client
- Parse multipart bodies and hand files to the upload pipeline
- Render results and errors as {success, data | error, details}
"""

from typing import Optional

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse

from portfolio_upload.core.config import settings
from portfolio_upload.core.errors import MalformedRequest, RateLimitExceeded, UploadError
from portfolio_upload.core.folders import AboutSection, PageType
from portfolio_upload.core.logger import logger
from portfolio_upload.models.request_models import UploadOptions
from portfolio_upload.models.response_models import (
    BatchUploadResponse,
    ErrorResponse,
    UploadResponse,
)
from portfolio_upload.services.multipart_parser import ParsedFormData, parse_multipart
from portfolio_upload.services.rate_limiter import RateLimiter, get_client_identifier, get_rate_limiter
from portfolio_upload.services.upload_pipeline import UploadPipeline

router = APIRouter(prefix="/upload", tags=["Upload"])

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    405: {"model": ErrorResponse},
    429: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}

_pipeline: Optional[UploadPipeline] = None


def get_upload_pipeline() -> UploadPipeline:
    global _pipeline
    if _pipeline is None:
        _pipeline = UploadPipeline()
    return _pipeline


def error_response(exc: UploadError) -> JSONResponse:
    body = ErrorResponse(**exc.to_dict())
    return JSONResponse(status_code=exc.status_code, content=body.to_json())


def internal_error_response(details: str) -> JSONResponse:
    body = ErrorResponse(error="Internal server error", details=details)
    return JSONResponse(status_code=500, content=body.to_json())


async def read_upload_form(request: Request, rate_limiter: RateLimiter) -> ParsedFormData:
    """Rate-limit the caller, then parse the multipart body."""
    client_host = request.client.host if request.client else None
    identifier = get_client_identifier(request.headers, client_host)
    if not rate_limiter.hit(identifier):
        logger.warning(f"Upload rate limit exceeded for {identifier}")
        raise RateLimitExceeded()

    content_type = request.headers.get("content-type", "")
    if "multipart/form-data" not in content_type:
        raise MalformedRequest("Request must be multipart/form-data", error="Invalid content type")

    body = await request.body()
    return parse_multipart(body, content_type)


def keep_original_requested(form: ParsedFormData, defaults: UploadOptions) -> UploadOptions:
    keep = form.fields.get("keepOriginal") == "true" or defaults.keep_original
    return defaults.model_copy(update={"keep_original": keep})


def no_file_error(batch: bool = False) -> MalformedRequest:
    allowed = ", ".join(settings.allowed_extensions)
    if batch:
        return MalformedRequest(
            f"Please upload image files. Allowed types: {allowed}", error="No files uploaded"
        )
    return MalformedRequest(
        f"Please upload an image file. Allowed types: {allowed}", error="No file uploaded"
    )


def preflight() -> Response:
    return Response(status_code=200)


def create_upload_endpoint(
    page_type: PageType,
    sub_type: Optional[str] = None,
    upload_options: Optional[UploadOptions] = None,
):
    """Build a single-file upload endpoint bound to one page/section."""
    defaults = upload_options or UploadOptions()

    async def upload_image(
        request: Request,
        rate_limiter: RateLimiter = Depends(get_rate_limiter),
        pipeline: UploadPipeline = Depends(get_upload_pipeline),
    ):
        try:
            form = await read_upload_form(request, rate_limiter)
            file = form.first_file()
            if file is None:
                raise no_file_error()

            data = await pipeline.upload(
                file, page_type, sub_type, keep_original_requested(form, defaults)
            )
        except UploadError as e:
            return error_response(e)
        except Exception:
            logger.exception("Upload handler error")
            return internal_error_response("An unexpected error occurred while processing the upload")

        destination = f"{page_type.value}/{sub_type}" if sub_type else page_type.value
        logger.info(f"Image uploaded successfully: {data.filename} to {destination}")
        return JSONResponse(status_code=200, content=UploadResponse(data=data).to_json())

    return upload_image


def create_batch_upload_endpoint(
    page_type: PageType,
    sub_type: Optional[str] = None,
    upload_options: Optional[UploadOptions] = None,
):
    """Build a multi-file upload endpoint bound to one page/section."""
    defaults = upload_options or UploadOptions()

    async def upload_images(
        request: Request,
        rate_limiter: RateLimiter = Depends(get_rate_limiter),
        pipeline: UploadPipeline = Depends(get_upload_pipeline),
    ):
        try:
            form = await read_upload_form(request, rate_limiter)
            if not form.files:
                raise no_file_error(batch=True)

            batch = await pipeline.upload_batch(
                form.files, page_type, sub_type, keep_original_requested(form, defaults)
            )
        except UploadError as e:
            return error_response(e)
        except Exception:
            logger.exception("Batch upload handler error")
            return internal_error_response("An unexpected error occurred while processing the uploads")

        return JSONResponse(status_code=200, content=BatchUploadResponse(data=batch).to_json())

    return upload_images


def register_upload_routes(
    page_type: PageType,
    sub_type: Optional[str] = None,
    upload_options: Optional[UploadOptions] = None,
):
    path = f"/{page_type.value}" + (f"/{sub_type}" if sub_type else "")
    name = path.strip("/").replace("/", "_")

    router.add_api_route(
        path,
        create_upload_endpoint(page_type, sub_type, upload_options),
        methods=["POST"],
        name=f"upload_{name}",
        responses=ERROR_RESPONSES,
    )
    router.add_api_route(
        f"{path}/batch",
        create_batch_upload_endpoint(page_type, sub_type, upload_options),
        methods=["POST"],
        name=f"upload_{name}_batch",
        responses=ERROR_RESPONSES,
    )
    router.add_api_route(path, preflight, methods=["OPTIONS"], include_in_schema=False)
    router.add_api_route(f"{path}/batch", preflight, methods=["OPTIONS"], include_in_schema=False)


# Every portfolio page keeps originals by default
KEEP_ORIGINALS = UploadOptions(keep_original=True)

register_upload_routes(PageType.ACHIEVEMENTS, upload_options=KEEP_ORIGINALS)
register_upload_routes(PageType.ARTISTIC, upload_options=KEEP_ORIGINALS)
register_upload_routes(PageType.PHOTOSHOOT, upload_options=KEEP_ORIGINALS)
for section in AboutSection:
    register_upload_routes(PageType.ABOUT, section.value, upload_options=KEEP_ORIGINALS)


@router.options("", include_in_schema=False)
def upload_preflight() -> Response:
    return preflight()


@router.post("", responses=ERROR_RESPONSES)
async def upload_to_page(
    request: Request,
    rate_limiter: RateLimiter = Depends(get_rate_limiter),
    pipeline: UploadPipeline = Depends(get_upload_pipeline),
):
    """
    Upload an image to the page named by the ``page`` form field.

    ``section`` is required when ``page`` is ``about``. Originals are kept
    only when ``keepOriginal`` is ``"true"``.
    """
    try:
        form = await read_upload_form(request, rate_limiter)
        file = form.first_file()
        if file is None:
            raise no_file_error()

        page = form.fields.get("page")
        if not page:
            raise MalformedRequest("Page parameter is required", error="Invalid page")

        data = await pipeline.upload(
            file, page, form.fields.get("section") or None, keep_original_requested(form, UploadOptions())
        )
    except UploadError as e:
        return error_response(e)
    except Exception:
        logger.exception("Upload handler error")
        return internal_error_response("An unexpected error occurred while processing the upload")

    logger.info(f"Image uploaded successfully: {data.filename} to {page}")
    return JSONResponse(status_code=200, content=UploadResponse(data=data).to_json())
