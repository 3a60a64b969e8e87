"""
Upload pipeline.

Orchestrates a single upload:

    received -> validated -> processed -> stored_optimized
             -> [stored_original] -> succeeded

Any stage can exit with an ``UploadError``. The only failure recovered here
is a failed write of the original copy: it is logged and the optimized
result is still returned. Nothing is retried.
"""

import asyncio
from enum import Enum
from typing import Iterable, Optional

from portfolio_upload.core.errors import StorageWriteFailed, UploadError
from portfolio_upload.core.folders import resolve_folder_path
from portfolio_upload.core.logger import logger
from portfolio_upload.core.storage import StorageManager
from portfolio_upload.models.request_models import UploadOptions
from portfolio_upload.models.response_models import BatchFailure, BatchUploadData, UploadData
from portfolio_upload.services.image_processor import ImageProcessor, get_image_processor
from portfolio_upload.services.multipart_parser import ParsedFile
from portfolio_upload.services.upload_validator import (
    file_extension,
    generate_unique_filename,
    validate_file,
)


class UploadStage(str, Enum):
    RECEIVED = "received"
    VALIDATED = "validated"
    PROCESSED = "processed"
    STORED_OPTIMIZED = "stored_optimized"
    STORED_ORIGINAL = "stored_original"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class UploadPipeline:
    """Validates, optimizes and stores uploaded images."""

    def __init__(
        self,
        storage: Optional[StorageManager] = None,
        processor: Optional[ImageProcessor] = None,
    ):
        self.storage = storage or StorageManager()
        self.processor = processor or get_image_processor()

    async def upload(
        self,
        file: ParsedFile,
        page_type,
        sub_type: Optional[str] = None,
        options: Optional[UploadOptions] = None,
    ) -> UploadData:
        """
        Upload and optimize one image.

        Args:
            file: Parsed file part (bytes, filename, declared MIME type)
            page_type: Portfolio page the image belongs to
            sub_type: Section of the page, when the page has sections
            options: keep_original / custom_filename

        Returns:
            UploadData with the optimized URL, optional original URL and dimensions

        Raises:
            UploadError: Validation, configuration, transcode or optimized-write failure
        """
        options = options or UploadOptions()
        stage = UploadStage.RECEIVED
        logger.debug(f"[{stage.value}] {file.filename} ({file.size} bytes)")

        try:
            validate_file(file.data, file.filename, file.mime_type)
            folder = resolve_folder_path(page_type, sub_type)
            stage = UploadStage.VALIDATED

            unique_name = generate_unique_filename(options.custom_filename or file.filename)

            processed = await asyncio.to_thread(self.processor.process, file.data)
            stage = UploadStage.PROCESSED

            optimized_path = f"{folder}/{unique_name}.{processed.format}"
            optimized_url = await asyncio.to_thread(
                self.storage.upload_file,
                StorageManager.BUCKET_OPTIMIZED,
                optimized_path,
                processed.data,
                processed.content_type,
                "optimized",
            )
            stage = UploadStage.STORED_OPTIMIZED
        except UploadError as e:
            logger.warning(
                f"[{UploadStage.FAILED.value}] {file.filename} after {stage.value}: {e.error} - {e.details}"
            )
            raise

        original_url = None
        if options.keep_original:
            original_url = await self._store_original(file, folder, unique_name)

        logger.info(
            f"[{UploadStage.SUCCEEDED.value}] {file.filename} -> {optimized_path} "
            f"({processed.width}x{processed.height})"
        )

        return UploadData(
            optimized_url=optimized_url,
            original_url=original_url,
            filename=f"{unique_name}.{processed.format}",
            width=processed.width,
            height=processed.height,
        )

    async def _store_original(self, file: ParsedFile, folder: str, unique_name: str) -> Optional[str]:
        original_path = f"{folder}/{unique_name}{file_extension(file.filename)}"
        try:
            url = await asyncio.to_thread(
                self.storage.upload_file,
                StorageManager.BUCKET_ORIGINALS,
                original_path,
                file.data,
                file.mime_type,
                "original",
            )
        except StorageWriteFailed as e:
            # Optimized copy is already stored; report success without originalUrl
            logger.warning(f"Failed to upload original {original_path}: {e.details}")
            return None

        logger.debug(f"[{UploadStage.STORED_ORIGINAL.value}] {original_path}")
        return url

    async def upload_batch(
        self,
        files: Iterable[ParsedFile],
        page_type,
        sub_type: Optional[str] = None,
        options: Optional[UploadOptions] = None,
    ) -> BatchUploadData:
        """
        Upload several images concurrently.

        Each file succeeds or fails on its own; failures are collected and
        never cancel the other uploads.
        """
        files = list(files)
        outcomes = await asyncio.gather(
            *(self.upload(f, page_type, sub_type, options) for f in files),
            return_exceptions=True,
        )

        batch = BatchUploadData()
        for parsed, outcome in zip(files, outcomes):
            if isinstance(outcome, UploadData):
                batch.uploaded.append(outcome)
            elif isinstance(outcome, UploadError):
                batch.failed.append(
                    BatchFailure(filename=parsed.filename, error=outcome.error, details=outcome.details)
                )
            elif isinstance(outcome, Exception):
                logger.error(f"Unexpected error uploading {parsed.filename}: {outcome!r}")
                batch.failed.append(
                    BatchFailure(
                        filename=parsed.filename,
                        error="Processing failed",
                        details=str(outcome) or "Unknown error occurred",
                    )
                )
            else:
                raise outcome

        logger.info(f"Batch upload: {batch.total_uploaded} succeeded, {batch.total_failed} failed")
        return batch
