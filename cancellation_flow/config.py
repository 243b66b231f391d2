"""Cancellation flow configuration: loaded from environment variables."""

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv(Path(__file__).resolve().parent.parent / ".env")

# Supabase
SUPABASE_URL = os.environ.get("SUPABASE_URL", "")
SUPABASE_SERVICE_KEY = os.environ.get("SUPABASE_SERVICE_KEY", "")

# Tables
CANCELLATIONS_TABLE = os.environ.get("CANCELLATIONS_TABLE", "cancellations")
SUBSCRIPTIONS_TABLE = os.environ.get("SUBSCRIPTIONS_TABLE", "subscriptions")

# Client side: where the flow reaches the cancellation endpoint
CANCELLATION_API_URL = os.environ.get("CANCELLATION_API_URL", "http://localhost:8000")
HTTP_TIMEOUT = float(os.environ.get("HTTP_TIMEOUT", "10"))

# Per-IP rate limit on POST /api/cancellation
RATE_LIMIT = int(os.environ.get("RATE_LIMIT", "30"))
RATE_WINDOW = int(os.environ.get("RATE_WINDOW", "60"))

# Server
HOST = os.environ.get("HOST", "0.0.0.0")
PORT = int(os.environ.get("PORT", "8000"))
LOG_LEVEL = os.environ.get("LOG_LEVEL", "info")
