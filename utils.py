"""
Utility functions for TeraRelay API
"""
import logging
import time
from typing import Any, Dict, Iterable, Optional, Sequence, Tuple

import psutil

logger = logging.getLogger(__name__)

FieldPath = Tuple[str, ...]

# Values that count as "not provided" upstream. 0 and False are real values.
_ABSENT = (None, "")


def is_supported_url(url: Optional[str], allowed_domains: Iterable[str]) -> bool:
    """Check that a share link mentions one of the allowed provider domains"""
    if not isinstance(url, str) or not url:
        return False
    return any(domain in url for domain in allowed_domains)


def get_path(data: Any, path: FieldPath) -> Any:
    """Walk nested dicts along path, returning None when any step is missing"""
    current = data
    for key in path:
        if not isinstance(current, dict):
            return None
        current = current.get(key)
    return current


def first_present(data: Dict[str, Any], paths: Sequence[FieldPath], default: str) -> str:
    """
    Evaluate an ordered fallback chain over upstream fields.

    Each path is tried first to last; the first value that is neither missing,
    null nor the empty string wins and is returned as text. When nothing
    matches, default is returned.
    """
    for path in paths:
        value = get_path(data, path)
        if value in _ABSENT:
            continue
        return value if isinstance(value, str) else str(value)
    return default


def elapsed_ms(start: float) -> int:
    """Whole milliseconds since a time.perf_counter() reading"""
    return int((time.perf_counter() - start) * 1000)


def format_elapsed(start: float) -> str:
    return f"{elapsed_ms(start)}ms"


def get_memory_usage() -> Dict[str, Any]:
    """Get current memory usage statistics"""
    try:
        process = psutil.Process()
        memory_info = process.memory_info()
        return {
            "rss": memory_info.rss,
            "vms": memory_info.vms,
            "percent": process.memory_percent(),
            "available": psutil.virtual_memory().available,
            "total": psutil.virtual_memory().total
        }
    except psutil.Error as e:
        logger.warning(f"Could not get memory usage: {e}")
        return {}


def get_system_info() -> Dict[str, Any]:
    """Get system information"""
    try:
        disk = psutil.disk_usage('/')
        return {
            "cpu_count": psutil.cpu_count(),
            "cpu_percent": psutil.cpu_percent(),
            "disk_usage": {
                "total": disk.total,
                "used": disk.used,
                "free": disk.free
            }
        }
    except (psutil.Error, OSError) as e:
        logger.warning(f"Could not get system info: {e}")
        return {}
