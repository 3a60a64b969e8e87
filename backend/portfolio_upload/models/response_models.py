"""
Pydantic models for API response schemas.

Responsibilities:
- Define standard response structures
- Ensure consistent API output (camelCase keys, omitted empty fields)
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ApiModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    def to_json(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class UploadData(ApiModel):
    """Result of one successful upload."""
    optimized_url: str = Field(..., alias="optimizedUrl", description="Public URL of the WebP image")
    original_url: Optional[str] = Field(None, alias="originalUrl", description="URL of the preserved original")
    filename: str = Field(..., description="Stored filename of the optimized image")
    width: int = Field(..., description="Optimized image width in pixels")
    height: int = Field(..., description="Optimized image height in pixels")


class UploadResponse(ApiModel):
    success: bool = True
    data: UploadData


class ErrorResponse(ApiModel):
    success: bool = False
    error: str = Field(..., description="Short error title")
    details: str = Field(..., description="Human-readable explanation")
    rule: Optional[str] = Field(None, description="Failed validation rule, if any")


class BatchFailure(ApiModel):
    filename: Optional[str] = Field(None, description="Original filename of the failed upload")
    error: str
    details: str


class BatchUploadData(ApiModel):
    uploaded: List[UploadData] = Field(default_factory=list)
    failed: List[BatchFailure] = Field(default_factory=list)

    @property
    def total_uploaded(self) -> int:
        return len(self.uploaded)

    @property
    def total_failed(self) -> int:
        return len(self.failed)

    def to_json(self) -> Dict[str, Any]:
        payload = super().to_json()
        payload["totalUploaded"] = self.total_uploaded
        payload["totalFailed"] = self.total_failed
        return payload


class BatchUploadResponse(ApiModel):
    success: bool = True
    data: BatchUploadData

    def to_json(self) -> Dict[str, Any]:
        return {"success": self.success, "data": self.data.to_json()}
