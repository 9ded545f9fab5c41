import os

BOOKING_DB = os.getenv("BOOKING_DB")

USER_SERVICE_URL = os.getenv("USER_SERVICE_URL") or "http://user-service:8000"
ITEM_SERVICE_URL = os.getenv("ITEM_SERVICE_URL") or "http://item-service:8000"

REDIS_URL = os.getenv("REDIS_URL")  # optional; without it locks are per-process and the breaker is off
RABBIT_URL = os.getenv("RABBIT_URL")  # optional in dev, required if you want events

HTTP_TIMEOUT = float(os.getenv("HTTP_TIMEOUT") or "3.0")
LOCK_TTL_SECONDS = int(os.getenv("LOCK_TTL_SECONDS") or "30")

LOG_LEVEL = (os.getenv("LOG_LEVEL") or "INFO").upper()
DB_ECHO = (os.getenv("DB_ECHO") or "").strip().lower() in ("1", "true", "yes", "on")

SHARER_HEADER = "X-Sharer-User-Id"
