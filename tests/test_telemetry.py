from typing import Iterator

import pytest

from hydra_engine.runtime import telemetry


@pytest.fixture(autouse=True)
def restore_default_config() -> Iterator[None]:
    yield
    telemetry.configure()


def test_unknown_preset_rejected() -> None:
    with pytest.raises(ValueError, match="Unknown preset"):
        telemetry.configure(preset="verbose")


def test_config_and_preset_are_exclusive() -> None:
    with pytest.raises(ValueError):
        telemetry.configure(config=object(), preset="development")


def test_configure_resets_logger_cache() -> None:
    before = telemetry.get_logger("hydra_engine.tests")
    assert telemetry.get_logger("hydra_engine.tests") is before

    telemetry.configure(preset="development")

    assert telemetry.get_logger("hydra_engine.tests") is not before


def test_span_reraises_failures() -> None:
    with pytest.raises(KeyError):
        with telemetry.span("tests::span", component=True, metadata={"k": 1}) as handle:
            handle.add_metadata("stage", 2)
            raise KeyError("missing")
