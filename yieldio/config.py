import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .fault import FaultHandler
from .fault import abort
from .fault import report

FAULT_HANDLERS: dict[str, FaultHandler] = {"report": report, "abort": abort}
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True, kw_only=True)
class Config:
    unhandled: str = "abort"
    log_level: str = "WARNING"
    register: tuple[str, ...] = ()

    def __post_init__(self):
        if self.unhandled not in FAULT_HANDLERS:
            raise ValueError(
                f"unhandled must be one of {', '.join(FAULT_HANDLERS)}, "
                f"got: {self.unhandled}"
            )
        if self.log_level not in LOG_LEVELS:
            raise ValueError(
                f"log_level must be one of {', '.join(LOG_LEVELS)}, "
                f"got: {self.log_level}"
            )

    def fault_handler(self) -> FaultHandler:
        return FAULT_HANDLERS[self.unhandled]


def find_pyproject(start: Path | None = None) -> Path | None:
    for path in [cwd := start or Path.cwd(), *cwd.parents]:
        candidate = path / "pyproject.toml"
        if candidate.is_file():
            return candidate
    return None


def load_config(start: Path | None = None) -> Config:
    """Load ``[tool.yieldio]`` from pyproject.toml, overridden by the environment.

    The environment variables are ``YIELDIO_UNHANDLED`` and
    ``YIELDIO_LOG_LEVEL``.
    """
    settings: dict[str, Any] = {}
    if pyproject := find_pyproject(start):
        with pyproject.open("rb") as f:
            settings = dict(tomllib.load(f).get("tool", {}).get("yieldio", {}))

    unknown = set(settings) - {"unhandled", "log_level", "register"}
    if unknown:
        raise ValueError(f"Unknown [tool.yieldio] settings: {', '.join(sorted(unknown))}")

    if unhandled := os.environ.get("YIELDIO_UNHANDLED"):
        settings["unhandled"] = unhandled
    if log_level := os.environ.get("YIELDIO_LOG_LEVEL"):
        settings["log_level"] = log_level

    return Config(
        unhandled=str(settings.get("unhandled", "abort")),
        log_level=str(settings.get("log_level", "WARNING")).upper(),
        register=tuple(settings.get("register", ())),
    )
