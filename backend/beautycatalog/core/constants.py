"""Catalog-wide constants for the beauty marketplace backend."""

from __future__ import annotations

BRAND_NAME = "Beauty Marketplace"

# Base service constraints
MIN_BASE_PRICE = 0.0
MIN_BASE_DURATION_MINUTES = 15  # minutes

# Professional offering duration band relative to the base duration
MIN_OFFERING_DURATION_MINUTES = 15  # absolute floor, minutes
MIN_DURATION_FACTOR = 0.5  # 50% of base duration
MAX_DURATION_FACTOR = 2.0  # 200% of base duration

# Offering metrics
MAX_AVERAGE_RATING = 5.0

# Discovery defaults
DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100
FALLBACK_PROFESSIONAL_NAME = "Professional"

# SSE (Server-Sent Events) endpoints end with this segment
SSE_PATH_SUFFIX = "/stream"
