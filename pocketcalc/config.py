"""Runtime configuration for pocketcalc.

Settings come from POCKETCALC_* environment variables with built-in defaults.
CLI options override whatever is loaded here.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from pocketcalc.arithmetic import DEFAULT_MAX_LENGTH, ERROR_TOKEN

logger = logging.getLogger(__name__)

ENV_PREFIX = "POCKETCALC_"

# Smallest display that can still show "-0." plus one digit.
_MIN_DISPLAY_LENGTH = 4

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class CalcConfig:
    """Engine and CLI settings."""

    max_display_length: int = DEFAULT_MAX_LENGTH
    error_token: str = ERROR_TOKEN
    log_level: str = "WARNING"


def min_display_length(error_token: str = ERROR_TOKEN) -> int:
    """Narrowest display that still fits both a short numeral and the error token."""
    return max(_MIN_DISPLAY_LENGTH, len(error_token))


def _read_int(env: Mapping[str, str], key: str, default: int) -> int:
    raw = env.get(key)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r: not an integer", key, raw)
        return default
    if value < _MIN_DISPLAY_LENGTH:
        logger.warning("Ignoring %s=%r: must be at least %d", key, raw, _MIN_DISPLAY_LENGTH)
        return default
    return value


def load_config(env: Optional[Mapping[str, str]] = None) -> CalcConfig:
    """Build a CalcConfig from the environment.

    Args:
        env: Mapping to read from. Defaults to os.environ.
    """
    env = os.environ if env is None else env

    error_token = env.get(f"{ENV_PREFIX}ERROR_TOKEN", "").strip() or ERROR_TOKEN
    log_level = env.get(f"{ENV_PREFIX}LOG_LEVEL", "").strip().upper() or "WARNING"
    if log_level not in _LOG_LEVELS:
        logger.warning("Ignoring %sLOG_LEVEL=%r: unknown level", ENV_PREFIX, log_level)
        log_level = "WARNING"

    width = _read_int(env, f"{ENV_PREFIX}MAX_DISPLAY", DEFAULT_MAX_LENGTH)
    narrowest = min_display_length(error_token)
    if width < narrowest:
        logger.warning(
            "Display width %d cannot show error token %r; widening to %d",
            width, error_token, narrowest,
        )
        width = narrowest

    return CalcConfig(
        max_display_length=width,
        error_token=error_token,
        log_level=log_level,
    )
