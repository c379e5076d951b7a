# Role: Central configuration module. Loads .env into environment variables, computes runtime flags (DEBUG)
# and configures logging. Importers read investment_advisor.config.DEBUG instead of threading flags through calls.

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

DEBUG: bool = False

DEFAULT_GEMINI_MODEL = "gemini-1.5-flash"
DEFAULT_GEMINI_TEMPERATURE = 0.7
DEFAULT_GEMINI_MAX_OUTPUT_TOKENS = 4096

# Key line: fonts with the rupee sign, checked in order when REPORT_FONT_PATH is unset.
REPORT_FONT_CANDIDATES = [
    "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
    "/usr/share/fonts/dejavu/DejaVuSans.ttf",
    "/usr/share/fonts/TTF/DejaVuSans.ttf",
    "/Library/Fonts/Arial Unicode.ttf",
    "C:/Windows/Fonts/arial.ttf",
]


class ConfigError(RuntimeError):
    """Raised at startup when required configuration is missing."""


def load_env() -> None:
    """
    Load .env into os.environ, then recompute DEBUG and the logging level.
    This makes DEBUG correct even if load_env() is called after import.
    """
    global DEBUG
    load_dotenv()
    # Key line: accept common truthy values.
    DEBUG = os.getenv("DEBUG", "0").lower() in {"1", "true", "yes"}
    logging.basicConfig(
        level=logging.DEBUG if DEBUG else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def gemini_api_key() -> str:
    key = os.getenv("GEMINI_API_KEY", "").strip()
    if not key:
        raise ConfigError("Missing GEMINI_API_KEY in environment or .env")
    return key


def gemini_model() -> str:
    return os.getenv("GEMINI_MODEL", "").strip() or DEFAULT_GEMINI_MODEL


def gemini_temperature() -> float:
    raw = os.getenv("GEMINI_TEMPERATURE", "").strip()
    if not raw:
        return DEFAULT_GEMINI_TEMPERATURE
    try:
        return float(raw)
    except ValueError as e:
        raise ConfigError(f"GEMINI_TEMPERATURE must be a number, got {raw!r}") from e


def gemini_max_output_tokens() -> int:
    raw = os.getenv("GEMINI_MAX_OUTPUT_TOKENS", "").strip()
    if not raw:
        return DEFAULT_GEMINI_MAX_OUTPUT_TOKENS
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigError(f"GEMINI_MAX_OUTPUT_TOKENS must be an integer, got {raw!r}") from e


def report_font_path() -> Optional[str]:
    """
    TrueType font used for PDF export. REPORT_FONT_PATH wins; otherwise the first common
    Unicode font found on this machine. None means the PDF falls back to built-in Helvetica.
    """
    configured = os.getenv("REPORT_FONT_PATH", "").strip()
    if configured:
        return configured
    for candidate in REPORT_FONT_CANDIDATES:
        if Path(candidate).is_file():
            return candidate
    return None
