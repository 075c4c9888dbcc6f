import pytest
import structlog
from typer.testing import CliRunner

from .__main__ import app
from .__main__ import load_target
from .samples.parallel import URLS

runner = CliRunner()


@pytest.fixture(autouse=True)
def reset_structlog():
    yield
    structlog.reset_defaults()


def failing():
    yield
    raise ValueError("boom")


def test_run_prints_result():
    result = runner.invoke(app, ["run", "yieldio.samples.parallel:total_size"])
    assert result.exit_code == 0
    assert str(sum(len(f"<html>{url}</html>") for url in URLS)) in result.output


def test_run_failure_exits_with_error():
    result = runner.invoke(app, ["run", "yieldio.main_test:failing"])
    assert result.exit_code == 1
    assert "boom" in result.output


def test_run_rejects_malformed_target():
    result = runner.invoke(app, ["run", "yieldio.main_test"])
    assert result.exit_code == 2


def test_log_level_option():
    result = runner.invoke(
        app, ["--log-level", "DEBUG", "run", "yieldio.samples.parallel:mapped_size"]
    )
    assert result.exit_code == 0
    assert "execution_started" in result.output
    assert "execution_suspended" in result.output
    assert "execution_resumed" in result.output


def test_log_level_is_case_insensitive():
    result = runner.invoke(
        app, ["--log-level", "error", "run", "yieldio.samples.parallel:mapped_size"]
    )
    assert result.exit_code == 0
    assert "execution_started" not in result.output


def test_rejects_unknown_log_level():
    result = runner.invoke(
        app, ["--log-level", "loud", "run", "yieldio.samples.parallel:total_size"]
    )
    assert result.exit_code == 2
    assert not isinstance(result.exception, KeyError)


@pytest.mark.parametrize(
    ("target", "variant"),
    [
        ("yieldio.main_test:failing", "NestedProgram"),
        ("yieldio.samples.parallel:request", "CallbackTask"),
        ("yieldio.samples.parallel:URLS", "Collection"),
        ("yieldio.samples.parallel.URLS", None),
    ],
)
def test_classify(target, variant):
    result = runner.invoke(app, ["classify", target])
    if variant is None:
        assert result.exit_code == 2
    else:
        assert result.exit_code == 0
        assert result.output.strip() == variant


def test_load_target_follows_attributes():
    assert load_target("yieldio.samples.parallel:fetch.__name__") == "fetch"
