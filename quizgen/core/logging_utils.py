from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from pathlib import Path

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class RotationPolicy:
    """When the quiz log file is rolled over and how many old copies are kept.

    A limit of zero disables that trigger; ``keep=0`` keeps every rotated copy.
    """

    max_bytes: int = 5 * 1024 * 1024
    max_age_hours: int = 24
    keep: int = 5

    @classmethod
    def from_env(cls) -> "RotationPolicy":
        return cls(
            max_bytes=_env_int("QUIZGEN_LOG_MAX_BYTES", cls.max_bytes),
            max_age_hours=_env_int("QUIZGEN_LOG_MAX_AGE_HOURS", cls.max_age_hours),
            keep=_env_int("QUIZGEN_LOG_MAX_FILES", cls.keep),
        )

    @property
    def enabled(self) -> bool:
        return self.max_bytes > 0 or self.max_age_hours > 0

    def is_due(self, stat: os.stat_result, now: datetime) -> bool:
        if self.max_bytes > 0 and stat.st_size >= self.max_bytes:
            return True
        if self.max_age_hours <= 0:
            return False
        modified = datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc)
        return now - modified >= timedelta(hours=self.max_age_hours)


def _rotated_copies(path: Path) -> list[Path]:
    """Earlier rotations of ``path``, newest first."""
    return sorted(
        path.parent.glob(f"{path.stem}.*{path.suffix}"),
        key=lambda p: p.stat().st_mtime,
        reverse=True,
    )


def rotate_log_if_needed(path: Path, policy: RotationPolicy | None = None) -> Path | None:
    """Move ``path`` aside when the policy says it is due; return the new name."""
    policy = policy or RotationPolicy.from_env()
    if not policy.enabled:
        return None
    try:
        stat = path.stat()
    except FileNotFoundError:
        return None
    now = datetime.now(timezone.utc)
    if not policy.is_due(stat, now):
        return None

    target = path.with_name(f"{path.stem}.{now:%Y%m%d-%H%M%S}{path.suffix}")
    path.replace(target)
    if policy.keep > 0:
        for stale in _rotated_copies(path)[policy.keep:]:
            stale.unlink(missing_ok=True)
    return target


def configure_logging(
    level: str | None = None,
    log_file: Path | None = None,
    rotation: RotationPolicy | None = None,
) -> None:
    """Set up root logging from QUIZGEN_LOG_LEVEL / QUIZGEN_LOG_FILE."""
    level_name = (level or os.environ.get("QUIZGEN_LOG_LEVEL", "INFO")).upper()
    if log_file is None:
        env_file = os.environ.get("QUIZGEN_LOG_FILE", "").strip()
        log_file = Path(env_file) if env_file else None

    rotated = None
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        rotated = rotate_log_if_needed(log_file, rotation)
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format=LOG_FORMAT,
        handlers=handlers,
        force=True,
    )
    if rotated is not None:
        logging.getLogger(__name__).info("Rotated previous log to %s", rotated)
