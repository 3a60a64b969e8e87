"""
Pydantic models for upload options.

Responsibilities:
- Define per-endpoint upload defaults
- Carry caller options into the upload pipeline
"""

from typing import Optional

from pydantic import BaseModel, Field


class UploadOptions(BaseModel):
    keep_original: bool = Field(False, description="Also store the untouched upload in the originals bucket")
    custom_filename: Optional[str] = Field(None, description="Name to derive the storage filename from")
