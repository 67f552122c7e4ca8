"""
Configuration management for TeraRelay API
"""
import os
import time
from typing import List

from dotenv import load_dotenv

load_dotenv()

# Global variables
app_start_time = time.time()


def _split_csv(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


class Config:
    """Application configuration with environment variable support"""
    HOST = os.getenv("HOST", "0.0.0.0")
    PORT = int(os.getenv("PORT", "3000"))
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
    LOG_FILE = os.getenv("LOG_FILE", "api.log")
    ENABLE_CORS = os.getenv("ENABLE_CORS", "true").lower() == "true"
    CORS_ORIGINS = _split_csv(os.getenv("CORS_ORIGINS", "*"))
    STATIC_DIR = os.getenv("STATIC_DIR", "public")

    # Upstream resolution service
    RESOLVER_API_URL = os.getenv(
        "RESOLVER_API_URL", "https://terabox-dl-9c39e76a6aa9.herokuapp.com/api"
    )
    RESOLVER_TIMEOUT = float(os.getenv("RESOLVER_TIMEOUT", "10"))
    ALLOWED_DOMAINS = _split_csv(os.getenv("ALLOWED_DOMAINS", "1024terabox.com"))

    @classmethod
    def validate(cls):
        """Validate configuration values"""
        if cls.PORT <= 0:
            raise ValueError("PORT must be positive")
        if cls.RESOLVER_TIMEOUT <= 0:
            raise ValueError("RESOLVER_TIMEOUT must be positive")
        if not cls.ALLOWED_DOMAINS:
            raise ValueError("ALLOWED_DOMAINS must list at least one domain")
        if not cls.RESOLVER_API_URL.startswith(("http://", "https://")):
            raise ValueError("RESOLVER_API_URL must be an http(s) URL")


# Validate configuration on startup
Config.validate()
