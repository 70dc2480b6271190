"""
app/config.py

Environment-driven settings for the generation provider and summaries.

Values come from the process environment, optionally seeded from `.env`
and `.env.local` at the project root. Blank values count as unset.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

DEFAULT_LLM_MODEL = "gemini-flash-latest"
DEFAULT_LLM_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/openai/"
ENV_FILENAMES = (".env", ".env.local")
PROJECT_ROOT = Path(__file__).resolve().parents[1]

_ALLOWED_ADAPTERS = {"openai", "mock"}
_API_KEY_VARIABLES = ("LLM_API_KEY", "GEMINI_API_KEY", "OPENAI_API_KEY")


def _parse_env_line(line: str) -> tuple[str, str] | None:
    line = line.strip()
    if not line or line.startswith("#"):
        return None
    name, sep, value = line.partition("=")
    name = name.strip()
    if not sep or not name:
        return None
    return name, value.strip().strip("\"'")


def load_env_files(root: Path | None = None) -> None:
    """
    Seed os.environ from the `.env` files under *root* (default: project root).

    Variables already present in the environment take precedence.
    """

    base = root or PROJECT_ROOT
    for filename in ENV_FILENAMES:
        env_path = base / filename
        if not env_path.is_file():
            continue
        for line in env_path.read_text(encoding="utf-8").splitlines():
            parsed = _parse_env_line(line)
            if parsed is not None:
                os.environ.setdefault(*parsed)


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    load_env_files()


def _read_env(name: str) -> str | None:
    _load_env_once()
    value = (os.getenv(name) or "").strip()
    return value or None


def _env_str(name: str, default: str) -> str:
    return _read_env(name) or default


def _env_int(name: str, default: int) -> int:
    raw = _read_env(name)
    try:
        return int(raw) if raw is not None else default
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = _read_env(name)
    try:
        return float(raw) if raw is not None else default
    except ValueError:
        return default


@dataclass(frozen=True)
class LLMSettings:
    """
    Text-generation provider settings.
    """

    adapter: str = "openai"
    model: str = DEFAULT_LLM_MODEL
    api_key: str | None = None
    base_url: str | None = DEFAULT_LLM_BASE_URL
    temperature: float = 0.7
    top_p: float = 0.9
    max_tokens: int = 4096


@dataclass(frozen=True)
class SummarySettings:
    fallback_summary_chars: int = 1000


@lru_cache(maxsize=1)
def get_llm_settings() -> LLMSettings:
    """
    Return cached LLM settings from environment variables.

    LLM_ADAPTER=mock selects the deterministic adapter; any value other
    than `openai` or `mock` falls back to `openai`. The API key is the
    first of LLM_API_KEY, GEMINI_API_KEY and OPENAI_API_KEY that is set.
    """

    adapter = _env_str("LLM_ADAPTER", "openai").lower()
    if adapter not in _ALLOWED_ADAPTERS:
        adapter = "openai"

    api_key = next(
        (value for value in map(_read_env, _API_KEY_VARIABLES) if value is not None),
        None,
    )
    return LLMSettings(
        adapter=adapter,
        model=_env_str("LLM_MODEL", DEFAULT_LLM_MODEL),
        api_key=api_key,
        base_url=_env_str("LLM_BASE_URL", DEFAULT_LLM_BASE_URL),
        temperature=_env_float("LLM_TEMPERATURE", 0.7),
        top_p=_env_float("LLM_TOP_P", 0.9),
        max_tokens=max(1, _env_int("LLM_MAX_TOKENS", 4096)),
    )


@lru_cache(maxsize=1)
def get_summary_settings() -> SummarySettings:
    return SummarySettings(
        fallback_summary_chars=max(1, _env_int("SUMMARY_FALLBACK_CHARS", 1000)),
    )
