"""Configuration for journey runs.

The core never reads the environment. ``RunnerConfig`` is passed explicitly
into ``JourneyRunner``; ``load_settings()`` is the one boundary where
environment variables (and the optional ``.env.defaults`` file at the
repository root) are consulted.

Precedence: process environment > ``.env.defaults`` > built-in default.
"""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Mapping, Optional
from urllib.parse import urljoin

DEFAULT_BASE_URL = "http://localhost:5173"

# Submission waits on server-side validation, hence the long ceilings.
DEFAULT_SUBMISSION_TIMEOUT = 120.0
DEFAULT_HEADING_TIMEOUT = 60.0
DEFAULT_ACTION_TIMEOUT = 30.0
DEFAULT_SETTLE_DELAY = 0.3
DEFAULT_POLL_INTERVAL = 0.25


@dataclass(frozen=True)
class RunnerConfig:
    """Timeouts and addressing for one ``JourneyRunner`` (seconds)."""

    base_url: str = DEFAULT_BASE_URL
    submission_timeout: float = DEFAULT_SUBMISSION_TIMEOUT
    heading_timeout: float = DEFAULT_HEADING_TIMEOUT
    action_timeout: float = DEFAULT_ACTION_TIMEOUT
    settle_delay: float = DEFAULT_SETTLE_DELAY
    poll_interval: float = DEFAULT_POLL_INTERVAL
    max_fill_attempts: int = 2

    def url(self, path: str) -> str:
        """Return an absolute URL for the provided journey path."""
        if path.startswith(("http://", "https://", "about:", "data:")):
            return path
        return urljoin(self.base_url.rstrip("/") + "/", path.lstrip("/"))

    @property
    def action_timeout_ms(self) -> float:
        return self.action_timeout * 1000


@dataclass
class HarnessSettings:
    """Boundary-level settings: browser launch options plus runner config."""

    runner: RunnerConfig = field(default_factory=RunnerConfig)
    headless: bool = True
    browser_type: str = "chromium"
    viewport_width: int = 1280
    viewport_height: int = 1024


ENV_DEFAULTS_PATH = Path(__file__).resolve().parents[2] / ".env.defaults"


class _Source:
    """Key lookup over ``environ``, then the parsed defaults file."""

    def __init__(self, environ: Mapping[str, str], defaults_path: Optional[Path] = None) -> None:
        self._environ = environ
        self._defaults = self._read_defaults(defaults_path) if defaults_path is not None else {}

    @staticmethod
    def _read_defaults(path: Path) -> Dict[str, str]:
        if not path.exists():
            return {}

        defaults: Dict[str, str] = {}
        for raw in path.read_text(encoding="utf-8").splitlines():
            line = raw.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue
            key, value = line.split("=", 1)
            value = value.strip()
            if len(value) >= 2 and value[0] in ('"', "'") and value[-1] == value[0]:
                value = value[1:-1]
            defaults[key.strip()] = value
        return defaults

    def raw(self, key: str) -> Optional[str]:
        value = self._environ.get(key)
        if value is None:
            value = self._defaults.get(key)
        if value is None or value.strip() == "":
            return None
        return value.strip()

    def string(self, key: str, default: str) -> str:
        value = self.raw(key)
        return default if value is None else value

    def number(self, key: str, default: float) -> float:
        value = self.raw(key)
        if value is None:
            return default
        try:
            parsed = float(value)
        except ValueError:
            raise ValueError(f"{key} must be a number of seconds, got {value!r}") from None
        if parsed < 0:
            raise ValueError(f"{key} must not be negative, got {value!r}")
        return parsed

    def integer(self, key: str, default: int) -> int:
        value = self.raw(key)
        if value is None:
            return default
        try:
            return int(value)
        except ValueError:
            raise ValueError(f"{key} must be an integer, got {value!r}") from None

    def flag(self, key: str, default: bool) -> bool:
        value = self.raw(key)
        if value is None:
            return default
        return value.lower() in {"1", "true", "yes", "on"}


def load_settings(
    environ: Optional[Mapping[str, str]] = None,
    use_defaults_file: bool = True,
    defaults_path: Optional[Path] = None,
) -> HarnessSettings:
    """Build ``HarnessSettings`` from the environment.

    Args:
        environ: Mapping to read instead of ``os.environ`` (tests).
        use_defaults_file: Consult a defaults file for unset keys.
        defaults_path: Defaults file to read; ``.env.defaults`` at the
            repository root when omitted.

    Raises:
        ValueError: A numeric setting is malformed.
    """
    path = (defaults_path or ENV_DEFAULTS_PATH) if use_defaults_file else None
    source = _Source(os.environ if environ is None else environ, path)

    runner = RunnerConfig(
        base_url=source.string("JOURNEY_BASE_URL", DEFAULT_BASE_URL),
        submission_timeout=source.number("JOURNEY_SUBMIT_TIMEOUT", DEFAULT_SUBMISSION_TIMEOUT),
        heading_timeout=source.number("JOURNEY_HEADING_TIMEOUT", DEFAULT_HEADING_TIMEOUT),
        action_timeout=source.number("JOURNEY_ACTION_TIMEOUT", DEFAULT_ACTION_TIMEOUT),
        settle_delay=source.number("JOURNEY_SETTLE_DELAY", DEFAULT_SETTLE_DELAY),
        poll_interval=source.number("JOURNEY_POLL_INTERVAL", DEFAULT_POLL_INTERVAL),
    )
    return HarnessSettings(
        runner=runner,
        headless=source.flag("PLAYWRIGHT_HEADLESS", True),
        browser_type=source.string("PLAYWRIGHT_BROWSER", "chromium"),
        viewport_width=source.integer("JOURNEY_VIEWPORT_WIDTH", 1280),
        viewport_height=source.integer("JOURNEY_VIEWPORT_HEIGHT", 1024),
    )
