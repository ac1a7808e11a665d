from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path


def _getenv(name: str, default: str) -> str:
    return os.environ.get(name, default).strip()


def _parse_ms(name: str, raw: str) -> float:
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer number of ms (got {raw!r})") from None
    if value < 0:
        raise ValueError(f"{name} must be >= 0 (got {value})")
    return value / 1000


@dataclass(frozen=True)
class ClientSettings:
    api_url: str
    cache_dir: Path
    debounce_seconds: float = 3.0
    auto_save_timeout: float = 5.0
    manual_save_timeout: float = 10.0


def load_client_settings() -> ClientSettings:
    api_url = _getenv("LMS_API_URL", "http://localhost:8000").rstrip("/")
    if not api_url.startswith(("http://", "https://")):
        raise ValueError(f"LMS_API_URL must be an http(s) URL (got {api_url!r})")

    cache_dir = Path(
        _getenv("LMS_CACHE_DIR", str(Path.home() / ".cache" / "lms-progress"))
    ).expanduser()

    return ClientSettings(
        api_url=api_url,
        cache_dir=cache_dir,
        debounce_seconds=_parse_ms("LMS_SAVE_DEBOUNCE_MS", _getenv("LMS_SAVE_DEBOUNCE_MS", "3000")),
        auto_save_timeout=_parse_ms("LMS_AUTO_SAVE_TIMEOUT_MS", _getenv("LMS_AUTO_SAVE_TIMEOUT_MS", "5000")),
        manual_save_timeout=_parse_ms(
            "LMS_MANUAL_SAVE_TIMEOUT_MS", _getenv("LMS_MANUAL_SAVE_TIMEOUT_MS", "10000")
        ),
    )
