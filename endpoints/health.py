"""
Health check endpoint
"""
import time
from fastapi import APIRouter

from config import Config, app_start_time
from models import HealthResponse
from utils import get_memory_usage, get_system_info

router = APIRouter()

API_VERSION = "1.0"


@router.get("/health", response_model=HealthResponse)
async def health():
    """Health check with system information"""
    uptime = time.time() - app_start_time
    return HealthResponse(
        status="healthy",
        version=API_VERSION,
        uptime=uptime,
        resolver_api=Config.RESOLVER_API_URL,
        allowed_domains=Config.ALLOWED_DOMAINS,
        memory_usage=get_memory_usage(),
        system_info=get_system_info()
    )
