"""
Share link resolution endpoint
"""
import time
import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from client import ExternalApiError, TeraboxApiClient, get_terabox_client
from config import Config
from models import ErrorResponse, ResolveRequest, ResolveResponse
from utils import first_present, format_elapsed, is_supported_url

logger = logging.getLogger(__name__)
router = APIRouter()

INVALID_URL_MESSAGE = "Invalid 1024terabox URL"
UPSTREAM_ERROR_MESSAGE = "External API returned an error"
RESOLVE_FAILED_MESSAGE = (
    "Failed to fetch file information. "
    "The link may be invalid or the external service is down."
)

# Ordered (source paths, default) chains for each outgoing field
FILENAME_CHAIN = ([("filename",)], "Unknown file")
SIZE_CHAIN = ([("size",)], "Unknown size")
THUMBNAIL_CHAIN = ([("thumbs", "url3"), ("thumbs", "url1")], "")
DOWNLOAD_CHAIN = ([("download",)], "")


class ResolveFailedError(Exception):
    """Uniform failure surfaced to clients when resolution does not succeed."""

    def __init__(self, message: str = RESOLVE_FAILED_MESSAGE):
        super().__init__(message)
        self.message = message


def build_resolve_response(data: Dict[str, Any], start_time: float) -> ResolveResponse:
    """Map a successful upstream payload onto the client-facing shape"""
    return ResolveResponse(
        status="success",
        filename=first_present(data, *FILENAME_CHAIN),
        size=first_present(data, *SIZE_CHAIN),
        thumbnail=first_present(data, *THUMBNAIL_CHAIN),
        response_time=first_present(data, [("response_time",)], format_elapsed(start_time)),
        url1=first_present(data, *DOWNLOAD_CHAIN),
        url2="",
        url3="",
    )


@router.post(
    "/resolve",
    response_model=ResolveResponse,
    responses={
        status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
        status.HTTP_502_BAD_GATEWAY: {"model": ErrorResponse},
    },
)
async def resolve_url(
    payload: Optional[ResolveRequest] = None,
    client: TeraboxApiClient = Depends(get_terabox_client),
):
    """
    Resolve a share link into file metadata and a direct download link.

    Invalid links are rejected with 400 before any upstream call. Every
    upstream problem collapses into one generic failure; the detail is only
    written to the log.
    """
    start_time = time.perf_counter()
    url = payload.url if payload else None

    if not is_supported_url(url, Config.ALLOWED_DOMAINS):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=ErrorResponse(message=INVALID_URL_MESSAGE).model_dump()
        )

    try:
        data = await client.fetch(url)
        if data.get("status") != "success":
            raise ExternalApiError(data.get("message") or UPSTREAM_ERROR_MESSAGE)
        result = build_resolve_response(data, start_time)
    except Exception as exc:
        logger.error(f"Resolve error: {exc}")
        raise ResolveFailedError() from exc

    logger.info(f"Resolved {url} in {format_elapsed(start_time)}")
    return result
