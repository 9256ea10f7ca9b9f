import math
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional

from .core import CANVAS_BACKGROUND, DEFAULT_SCALE
from .export import DEFAULT_PACING_DELAY, DEFAULT_SETTLE_DELAY


class ConfigError(ValueError):
    pass


@dataclass
class ExportSettings:
    """
    Tuning knobs for a run. The two delays are empirical defaults, not
    guaranteed-sufficient values; raise them for slow renderers or strict
    download throttling.
    """

    output_dir: Path = field(default_factory=lambda: Path("outputs"))
    assets_dir: Path = field(default_factory=lambda: Path("assets"))
    scale: float = DEFAULT_SCALE
    settle_delay: float = DEFAULT_SETTLE_DELAY
    pacing_delay: float = DEFAULT_PACING_DELAY
    background: str = CANVAS_BACKGROUND
    http_timeout: float = 10.0

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ExportSettings":
        env = os.environ if environ is None else environ
        settings = cls()

        if env.get("POSTER_OUTPUT_DIR"):
            settings.output_dir = Path(env["POSTER_OUTPUT_DIR"])
        if env.get("POSTER_ASSETS_DIR"):
            settings.assets_dir = Path(env["POSTER_ASSETS_DIR"])
        if env.get("POSTER_SCALE"):
            settings.scale = _positive(env, "POSTER_SCALE")
        if env.get("POSTER_SETTLE_DELAY_MS"):
            settings.settle_delay = _non_negative(env, "POSTER_SETTLE_DELAY_MS") / 1000.0
        if env.get("POSTER_PACING_DELAY_MS"):
            settings.pacing_delay = _non_negative(env, "POSTER_PACING_DELAY_MS") / 1000.0
        if env.get("POSTER_BACKGROUND"):
            settings.background = _hex_color(env, "POSTER_BACKGROUND")
        if env.get("POSTER_HTTP_TIMEOUT"):
            settings.http_timeout = _positive(env, "POSTER_HTTP_TIMEOUT")

        return settings


def _number(env: Mapping[str, str], name: str) -> float:
    raw = env[name].strip()
    try:
        value = float(raw)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from None
    if not math.isfinite(value):
        raise ConfigError(f"{name} must be finite, got {raw!r}")
    return value


def _positive(env: Mapping[str, str], name: str) -> float:
    value = _number(env, name)
    if value <= 0:
        raise ConfigError(f"{name} must be greater than zero, got {value}")
    return value


def _non_negative(env: Mapping[str, str], name: str) -> float:
    value = _number(env, name)
    if value < 0:
        raise ConfigError(f"{name} must not be negative, got {value}")
    return value


def _hex_color(env: Mapping[str, str], name: str) -> str:
    raw = env[name].strip()
    digits = raw.lstrip("#")
    if len(digits) not in (3, 6) or any(ch not in "0123456789abcdefABCDEF" for ch in digits):
        raise ConfigError(f"{name} must be a hex color like #F5F6F8, got {raw!r}")
    return f"#{digits.upper()}"
