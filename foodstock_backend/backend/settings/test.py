# backend/settings/test.py
"""
PATH: backend/settings/test.py

TEST SETTINGS

- Throttling off (API tests fire many requests per second)
- Fast password hashing
- Inventory defaults pinned so tests don't depend on the developer's .env
"""

from __future__ import annotations

from .base import *  # noqa: F403
from .base import REST_FRAMEWORK

DEBUG = False

REST_FRAMEWORK = {
    **REST_FRAMEWORK,
    "DEFAULT_THROTTLE_CLASSES": (),
}

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

INVENTORY_LOW_STOCK_THRESHOLD = 50
INVENTORY_EXPIRY_WINDOW_DAYS = 30
