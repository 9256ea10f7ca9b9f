from pathlib import Path

import pytest

from poster_export.config import ConfigError, ExportSettings


def test_defaults() -> None:
    settings = ExportSettings.from_env({})
    assert settings.scale == 3
    assert settings.settle_delay == pytest.approx(0.8)
    assert settings.pacing_delay == pytest.approx(0.6)
    assert settings.background == "#F5F6F8"
    assert settings.output_dir == Path("outputs")


def test_env_overrides() -> None:
    settings = ExportSettings.from_env(
        {
            "POSTER_OUTPUT_DIR": "exports",
            "POSTER_SCALE": "2",
            "POSTER_SETTLE_DELAY_MS": "1500",
            "POSTER_PACING_DELAY_MS": "0",
            "POSTER_BACKGROUND": "fff",
        }
    )
    assert settings.output_dir == Path("exports")
    assert settings.scale == 2
    assert settings.settle_delay == pytest.approx(1.5)
    assert settings.pacing_delay == 0
    assert settings.background == "#FFF"


@pytest.mark.parametrize(
    "name, value",
    [
        ("POSTER_SCALE", "0"),
        ("POSTER_SCALE", "big"),
        ("POSTER_PACING_DELAY_MS", "-5"),
        ("POSTER_BACKGROUND", "#12345G"),
        ("POSTER_HTTP_TIMEOUT", "inf"),
    ],
)
def test_invalid_values_name_the_variable(name, value) -> None:
    with pytest.raises(ConfigError, match=name):
        ExportSettings.from_env({name: value})
