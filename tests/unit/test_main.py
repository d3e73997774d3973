"""Unit tests for the CLI bootstrap paths."""

import logging

import pytest

from delegateAgent.main import async_main, parse_args


@pytest.fixture(autouse=True)
def restore_package_logger():
    """setup_logging detaches the package logger from root; undo it after each test."""
    logger = logging.getLogger("delegateAgent")
    handlers, propagate, level = list(logger.handlers), logger.propagate, logger.level
    yield
    logger.handlers = handlers
    logger.propagate = propagate
    logger.setLevel(level)


def test_parse_args():
    args = parse_args(["-c", "config.json", "--log-level", "debug", "--log-file", "out.log"])

    assert args.config == "config.json"
    assert args.log_level == "debug"
    assert args.log_file == "out.log"


@pytest.mark.asyncio
async def test_missing_config_file(tmp_path, capsys):
    code = await async_main(parse_args(["-c", str(tmp_path / "missing.json")]))

    assert code == 1
    assert "Config file not found" in capsys.readouterr().err


@pytest.mark.asyncio
async def test_invalid_log_level(tmp_path, capsys):
    config = tmp_path / "config.json"
    config.write_text("{}", encoding="utf-8")

    code = await async_main(parse_args(["-c", str(config), "--log-level", "loud"]))

    assert code == 1
    assert "Invalid log level" in capsys.readouterr().err


@pytest.mark.asyncio
async def test_invalid_config_exits_with_error(tmp_path):
    config = tmp_path / "config.json"
    config.write_text('{"mcps": {}}', encoding="utf-8")

    code = await async_main(parse_args(["-c", str(config), "--log-level", "error"]))

    assert code == 1


@pytest.mark.asyncio
async def test_serves_and_shuts_down(tmp_path, mocker):
    config = tmp_path / "config.yaml"
    config.write_text("mcps: {}\ntools: []\n", encoding="utf-8")

    app = mocker.MagicMock()
    app.shutdown = mocker.AsyncMock()
    build = mocker.patch("delegateAgent.main.build_application", mocker.AsyncMock(return_value=app))
    serve = mocker.patch("delegateAgent.main.serve_stdio", mocker.AsyncMock())

    code = await async_main(parse_args(["-c", str(config), "--log-level", "warning"]))

    assert code == 0
    build.assert_awaited_once()
    serve.assert_awaited_once_with(app.server)
    app.shutdown.assert_awaited_once()
