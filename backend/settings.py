import os
from typing import Optional

# Basic settings helper to read environment configuration.


def _as_bool(val: str | None, default: bool = False) -> bool:
    if val is None:
        return default
    return val.lower() in ("1", "true", "yes", "on")


def _as_int(val: str | None, default: int) -> int:
    if val is None or not val.strip():
        return default
    try:
        return int(val)
    except ValueError:
        return default


def _as_timeout(val: str | None, default: Optional[float]) -> Optional[float]:
    """Seconds as float; "0" or "none" disables the timeout."""
    if val is None or not val.strip():
        return default
    if val.strip().lower() in ("0", "none", "off"):
        return None
    try:
        parsed = float(val)
    except ValueError:
        return default
    return parsed if parsed > 0 else None


class Settings:
    def __init__(self) -> None:
        # Files decoded concurrently per analysis batch
        self.ANALYSIS_BATCH_SIZE: int = max(1, _as_int(os.getenv("ANALYSIS_BATCH_SIZE"), 3))
        self.DECODE_TIMEOUT_SECONDS: Optional[float] = _as_timeout(os.getenv("DECODE_TIMEOUT_SECONDS"), 30.0)
        # Upload preparation (HEIC conversion always runs; resizing is optional)
        self.OPTIMIZE_UPLOADS: bool = _as_bool(os.getenv("OPTIMIZE_UPLOADS"), True)
        self.MAX_IMAGE_DIMENSION: int = _as_int(os.getenv("MAX_IMAGE_DIMENSION"), 1920)
        self.MAX_UPLOAD_BYTES: int = _as_int(os.getenv("MAX_UPLOAD_BYTES"), 800 * 1024)
        self.JPEG_QUALITY: int = _as_int(os.getenv("JPEG_QUALITY"), 85)


settings = Settings()
