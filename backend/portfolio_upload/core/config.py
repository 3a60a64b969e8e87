"""
Application configuration settings.

Responsibilities:
- Load environment variables
- Define storage buckets, size limits and image optimization parameters
- Hold the table of accepted upload types
"""

import os


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return int(value)


# Extension -> MIME type accepted for upload. Validation reads both columns.
ALLOWED_FILE_TYPES = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
}


class Settings:
    PROJECT_NAME: str = "Portfolio Upload API"
    API_PREFIX: str = "/api"

    SUPABASE_URL: str = os.getenv("SUPABASE_URL") or os.getenv("VITE_SUPABASE_URL", "")
    SUPABASE_SERVICE_ROLE_KEY: str = os.getenv("SUPABASE_SERVICE_ROLE_KEY", "")

    BUCKET_OPTIMIZED: str = os.getenv("BUCKET_OPTIMIZED", "portfolio-optimized")
    BUCKET_ORIGINALS: str = os.getenv("BUCKET_ORIGINALS", "portfolio-originals")

    MAX_FILE_SIZE: int = _env_int("MAX_FILE_SIZE", 10 * 1024 * 1024)
    FILENAME_MAX_LENGTH: int = _env_int("FILENAME_MAX_LENGTH", 50)

    # Image optimization
    MAX_IMAGE_WIDTH: int = _env_int("MAX_IMAGE_WIDTH", 2000)
    OUTPUT_FORMAT: str = "webp"
    OUTPUT_CONTENT_TYPE: str = "image/webp"
    WEBP_QUALITY: int = _env_int("WEBP_QUALITY", 30)
    WEBP_EFFORT: int = _env_int("WEBP_EFFORT", 6)

    # Upload rate limiting (per client identifier)
    RATE_LIMIT_MAX_UPLOADS: int = _env_int("RATE_LIMIT_MAX_UPLOADS", 20)
    RATE_LIMIT_WINDOW_SECONDS: int = _env_int("RATE_LIMIT_WINDOW_SECONDS", 60 * 60)

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    CORS_ORIGINS: list = [
        origin.strip() for origin in os.getenv("CORS_ORIGINS", "*").split(",") if origin.strip()
    ]

    @property
    def allowed_mime_types(self) -> set:
        return set(ALLOWED_FILE_TYPES.values())

    @property
    def allowed_extensions(self) -> list:
        return list(ALLOWED_FILE_TYPES.keys())

    @property
    def max_file_size_mb(self) -> float:
        return self.MAX_FILE_SIZE / (1024 * 1024)


settings = Settings()
