"""Runtime settings read from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass

DEFAULT_MANIFEST = "composer.lock"
DEFAULT_DEBOUNCE_MS = 200
DEFAULT_HTTP_TIMEOUT = 30.0


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    """Settings for the GitLab client and the panel watcher.

    Environment variables:
        COMPOSERDIFF_GITLAB_URL    — GitLab instance root (e.g. https://gitlab.com)
        COMPOSERDIFF_GITLAB_TOKEN  — personal access token, sent as PRIVATE-TOKEN
        COMPOSERDIFF_MANIFEST      — lock file name (default: composer.lock)
        COMPOSERDIFF_DEBOUNCE_MS   — quiet period before a presence check (default: 200)
        COMPOSERDIFF_HTTP_TIMEOUT  — HTTP timeout in seconds (default: 30)
    """

    gitlab_url: str | None = None
    gitlab_token: str | None = None
    manifest_name: str = DEFAULT_MANIFEST
    debounce_ms: float = DEFAULT_DEBOUNCE_MS
    http_timeout: float = DEFAULT_HTTP_TIMEOUT

    @property
    def debounce_delay(self) -> float:
        """Debounce delay in seconds."""
        return self.debounce_ms / 1000.0

    @classmethod
    def from_env(cls) -> Settings:
        return cls(
            gitlab_url=os.environ.get("COMPOSERDIFF_GITLAB_URL") or None,
            gitlab_token=os.environ.get("COMPOSERDIFF_GITLAB_TOKEN") or None,
            manifest_name=os.environ.get("COMPOSERDIFF_MANIFEST") or DEFAULT_MANIFEST,
            debounce_ms=max(0.0, _env_float("COMPOSERDIFF_DEBOUNCE_MS", DEFAULT_DEBOUNCE_MS)),
            http_timeout=_env_float("COMPOSERDIFF_HTTP_TIMEOUT", DEFAULT_HTTP_TIMEOUT),
        )
