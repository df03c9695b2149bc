"""Application-wide constants for the MindBridge platform."""

from __future__ import annotations

import os

BRAND_NAME = "MindBridge"

API_TITLE = f"{BRAND_NAME} API"
API_VERSION = "1.0.0"
API_DESCRIPTION = "Session booking, availability and payments for the counseling platform"

# Session duration constraints
MIN_SESSION_DURATION = 15  # minutes
MAX_SESSION_DURATION = 240  # minutes

# Text constraints
MAX_CONCERNS_LENGTH = 2000

# Availability constraints
MAX_SLOTS_PER_REQUEST = 200

# Slot time format, e.g. "14:00"
SLOT_TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"

DEFAULT_DEV_ORIGINS = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
    "http://localhost:8081",
]


def _split_env(name: str) -> list[str]:
    value = os.getenv(name, "")
    return [origin.strip() for origin in value.split(",") if origin.strip()]


ALLOWED_ORIGINS = _split_env("ALLOWED_ORIGINS") or DEFAULT_DEV_ORIGINS
