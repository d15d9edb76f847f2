"""Centralised default constants for kubecost_adapter.

Every project-wide magic number / string lives here.
Import these instead of hard-coding values in function signatures or CLI options.
"""

from __future__ import annotations

from typing import Final

# ── Windows ──
DEFAULT_WINDOW: Final[str] = "30d"
DEFAULT_PREDICTION_WINDOW: Final[str] = "2d"
PROJECTION_LOOKBACK_DAYS: Final[int] = 30
DAYS_PER_MONTH: Final[float] = 30.0

# ── Backend ──
DEFAULT_TIMEOUT_SECONDS: Final[float] = 15.0
ALLOCATION_PATH: Final[str] = "/model/allocation"
PREDICTION_PATH: Final[str] = "/model/prediction/speccost"
BACKEND_SUCCESS_CODE: Final[int] = 200
HTTP_CLIENT_ERROR: Final[int] = 400

# ── Pricing ──
DEFAULT_CURRENCY: Final[str] = "USD"
PROJECTION_BILLING_DETAIL: Final[str] = "kubecost-avg-daily"
PRICING_PROVIDER: Final[str] = "kubernetes"
PRICING_BILLING_MODE: Final[str] = "per_day"

# ── Plugin identity ──
PLUGIN_NAME: Final[str] = "kubecost"
COST_SOURCE: Final[str] = "kubecost"

# ── Serving ──
DEFAULT_HOST: Final[str] = "127.0.0.1"
DEFAULT_PORT: Final[int] = 50051

# ── Environment ──
CONFIG_PATH_ENV: Final[str] = "KUBECOST_CONFIG"
