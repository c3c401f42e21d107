"""
farmwise.config — YAML Configuration Loader
============================================

Reads ``config.yaml`` for **non-secret** settings (branding, OTP window,
bonus amounts, paging).  Secrets such as ``DATABASE_URL``, ``JWT_SECRET``
and the SMTP/Twilio credentials are read from the environment (``.env``).

Usage::

    from farmwise.config import load_config

    cfg = load_config()          # reads ./config.yaml by default
    print(cfg.app_name)          # "FarmWise"
    print(cfg.otp_ttl_minutes)   # 10
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields
from pathlib import Path

import yaml

from farmwise.constants import OTP_TTL, POINTS_PER_LEVEL, VERIFICATION_BONUS_POINTS

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Typed settings object
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class FarmwiseConfig:
    """Immutable configuration loaded from ``config.yaml``.

    Every field has a default so the service runs without a config file.
    """

    # Identity
    app_name: str = "FarmWise"
    client_url: str = "http://localhost:3000"
    email_from: str = "no-reply@farmwise.com"

    # Verification
    otp_ttl_minutes: int = int(OTP_TTL.total_seconds() // 60)
    verification_bonus_points: int = VERIFICATION_BONUS_POINTS

    # Gamification
    points_per_level: int = POINTS_PER_LEVEL

    # Listing
    default_page_size: int = 10


# Settings that must be at least 1
_POSITIVE_KEYS = (
    "otp_ttl_minutes",
    "verification_bonus_points",
    "points_per_level",
    "default_page_size",
)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------
def load_config(path: str | Path = "config.yaml") -> FarmwiseConfig:
    """Read *path* and return a :class:`FarmwiseConfig` instance.

    A missing file yields the defaults.  Unknown keys are ignored with a
    warning so a typo never silently changes behaviour.

    Raises
    ------
    ValueError
        If a known key holds a value that cannot be coerced to its type,
        or a count (TTL, bonus, level size, page size) below 1.
    """
    config_path = Path(path)
    if not config_path.exists():
        logger.info("No config file at %s — using defaults", config_path.resolve())
        return FarmwiseConfig()

    with open(config_path, encoding="utf-8") as fh:
        raw: dict = yaml.safe_load(fh) or {}

    known = {f.name: f for f in fields(FarmwiseConfig)}
    values: dict[str, object] = {}
    for key, value in raw.items():
        if key not in known:
            logger.warning("Ignoring unknown config key %r in %s", key, config_path)
            continue
        default = known[key].default
        values[key] = type(default)(value) if value is not None else default

    for key in _POSITIVE_KEYS:
        if key in values and values[key] < 1:
            raise ValueError(f"{key} must be at least 1 in {config_path}, got {values[key]}")

    return FarmwiseConfig(**values)
