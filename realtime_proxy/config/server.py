"""HTTP host settings (port, CORS, service identity)."""

import os


HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "3000"))

SERVICE_NAME = "Qwen Omni Realtime Proxy Server"
SERVICE_VERSION = os.getenv("SERVICE_VERSION", "1.0.0")
HEALTH_PATH = "/health"

CORS_ALLOW_ORIGINS = [o.strip() for o in os.getenv("CORS_ALLOW_ORIGINS", "*").split(",") if o.strip()]
CORS_ALLOW_METHODS = ["GET", "POST", "OPTIONS"]
CORS_ALLOW_HEADERS = ["Content-Type", "Authorization"]


__all__ = [
    "HOST",
    "PORT",
    "SERVICE_NAME",
    "SERVICE_VERSION",
    "HEALTH_PATH",
    "CORS_ALLOW_ORIGINS",
    "CORS_ALLOW_METHODS",
    "CORS_ALLOW_HEADERS",
]
