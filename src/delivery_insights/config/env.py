# src/delivery_insights/config/env.py
from __future__ import annotations

import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Dict, Optional, Tuple

from dotenv import dotenv_values, find_dotenv, load_dotenv

from delivery_insights.models import Objectives


class EnvError(RuntimeError):
    """Raised when environment variables are missing or malformed."""


# Objectives field -> variable that overrides it
OBJECTIVE_KEYS: Dict[str, str] = {
    "average_rating": "OBJECTIVE_AVERAGE_RATING",
    "average_sentiment": "OBJECTIVE_AVERAGE_SENTIMENT",
    "punctuality_rate": "OBJECTIVE_PUNCTUALITY_RATE",
    "failure_rate": "OBJECTIVE_FAILURE_RATE",
    "forced_on_site_rate": "OBJECTIVE_FORCED_ON_SITE_RATE",
    "forced_no_contact_rate": "OBJECTIVE_FORCED_NO_CONTACT_RATE",
    "web_completion_rate": "OBJECTIVE_WEB_COMPLETION_RATE",
}

SUMMARY_KEYS: Tuple[str, ...] = ("SUMMARY_API_URL", "SUMMARY_API_KEY")


def _find_dotenv_from(start: Path) -> Optional[Path]:
    for folder in (start, *start.parents):
        candidate = folder / ".env"
        if candidate.is_file():
            return candidate
    found = find_dotenv(filename=".env", usecwd=True)
    return Path(found) if found else None


def load_project_dotenv(start: Optional[Path] = None, *, override: bool = False) -> Path:
    """
    Load the nearest `.env` above `start` (default: CWD) into os.environ.
    Existing variables win unless `override=True`. Returns the resolved path,
    or Path() when there is no such file.
    """
    path = _find_dotenv_from(Path.cwd() if start is None else Path(start))
    if path is None:
        return Path()
    load_dotenv(dotenv_path=path, override=override)
    return path.resolve()


def env(name: str, *, default: Optional[str] = None, required: bool = False, cast=None):
    """os.environ lookup: KeyError when `required` and unset, `cast` applied when set."""
    if name not in os.environ:
        if required:
            raise KeyError(name)
        return default
    raw = os.environ[name]
    return cast(raw) if cast is not None else raw


def load_env(
    dotenv_path: Optional[Path] = None,
    *,
    override: bool = False,
    required_keys: Tuple[str, ...] = (),
    strict: bool = False,
) -> Dict[str, str]:
    """
    Load a .env file (the given one, else the nearest project one) into the
    process environment and return the pairs it defines.

    With `strict=True`, every name in `required_keys` must be set afterwards,
    from the file or from the process, or EnvError is raised.
    """
    path = Path(dotenv_path) if dotenv_path else load_project_dotenv(override=override)

    loaded: Dict[str, str] = {}
    if path.is_file():
        load_dotenv(dotenv_path=path, override=override)
        loaded = {k: v for k, v in dotenv_values(path).items() if v is not None}

    if strict:
        missing = [k for k in required_keys if not os.getenv(k)]
        if missing:
            raise EnvError(
                f"Missing required environment variable(s): {', '.join(missing)}")
    return loaded


def get_objectives(
    dotenv_path: Path | str | None = ".env",
    *,
    strict: bool = False,
    logger=None,
) -> Objectives:
    """
    Objectives with OBJECTIVE_* overrides applied ("4,5" reads as 4.5).

    A value that is not a number raises EnvError when `strict=True`; otherwise
    it is logged and the default is kept.
    """
    load_env(Path(dotenv_path) if dotenv_path else None)

    defaults = Objectives()
    overrides: Dict[str, float] = {}
    for f in fields(Objectives):
        key = OBJECTIVE_KEYS[f.name]
        raw = (env(key, default="") or "").strip()
        if not raw:
            continue
        try:
            overrides[f.name] = float(raw.replace(",", "."))
        except ValueError:
            if strict:
                raise EnvError(f"{key} must be a number, got {raw!r}") from None
            if logger:
                logger.warning("Ignoring %s=%r (not a number); using %s",
                               key, raw, getattr(defaults, f.name))
    return Objectives(**overrides)


@dataclass(frozen=True)
class SummaryEnv:
    SUMMARY_API_URL: str
    SUMMARY_API_KEY: str


def get_summary_env(dotenv_path: Path | str | None = ".env", *, strict: bool = True) -> Optional[SummaryEnv]:
    """
    Summary service settings. Missing keys raise EnvError when `strict=True`,
    and give None otherwise.
    """
    load_env(
        Path(dotenv_path) if dotenv_path else None,
        required_keys=SUMMARY_KEYS,
        strict=strict,
    )
    url, key = (env(k) for k in SUMMARY_KEYS)
    if not url or not key:
        return None
    return SummaryEnv(SUMMARY_API_URL=url, SUMMARY_API_KEY=key)


__all__ = [
    "EnvError",
    "OBJECTIVE_KEYS",
    "SUMMARY_KEYS",
    "load_project_dotenv",
    "load_env",
    "env",
    "get_objectives",
    "SummaryEnv",
    "get_summary_env",
]
