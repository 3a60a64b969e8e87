"""
backend/portfolio_upload/main.py

FastAPI Entrypoint.

Responsibilities:
- Initialize FastAPI app
- Register upload router
- Setup middleware (CORS, logging)
- Render HTTP errors in the {success, error, details} shape
- Health check endpoint
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from portfolio_upload import __version__
from portfolio_upload.core.config import settings
from portfolio_upload.core.logger import setup_logger
from portfolio_upload.models.response_models import ErrorResponse
from portfolio_upload.routes import upload

logger = setup_logger()

app = FastAPI(
    title=settings.PROJECT_NAME,
    description="Image upload, optimization and storage for the portfolio site",
    version=__version__,
)

# CORS Configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["POST", "OPTIONS"],
    allow_headers=["Content-Type", "Accept"],
)

app.include_router(upload.router, prefix=settings.API_PREFIX)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 405:
        body = ErrorResponse(error="Method not allowed", details="Only POST requests are allowed")
    else:
        body = ErrorResponse(error=str(exc.detail), details=str(exc.detail))
    return JSONResponse(status_code=exc.status_code, content=body.to_json(), headers=exc.headers)


@app.get("/")
async def root():
    """Health check endpoint."""
    return {"message": f"{settings.PROJECT_NAME} is running"}


logger.info(f"{settings.PROJECT_NAME} v{__version__} ready")
