import json
import logging

from cli_bridge.models.config import AppConfig
from cli_bridge.utils.config import load_config
from cli_bridge.utils.logging import get_logger, setup_logging


def test_defaults_without_file(tmp_path, monkeypatch) -> None:
    monkeypatch.setattr("cli_bridge.utils.config._config", None)
    monkeypatch.delenv("GEMINI_CLI_WORKING_DIR", raising=False)
    monkeypatch.delenv("LOG_LEVEL", raising=False)

    config = load_config(tmp_path / "config.json")

    assert config == AppConfig()
    assert config.cli.executable == "gemini"
    assert config.stream.kill_grace_sec == 5.0


def test_loads_json_file(tmp_path, monkeypatch) -> None:
    monkeypatch.setattr("cli_bridge.utils.config._config", None)
    monkeypatch.delenv("GEMINI_CLI_WORKING_DIR", raising=False)
    path = tmp_path / "config.json"
    path.write_text(json.dumps({
        "server": {"port": 9000},
        "cli": {"package_runner": "bunx", "package_runner_args": ["--bun"]},
    }))

    config = load_config(path)

    assert config.server.port == 9000
    assert config.cli.package_runner == "bunx"
    assert config.cli.package_runner_args == ["--bun"]


def test_environment_overrides(tmp_path, monkeypatch) -> None:
    monkeypatch.setattr("cli_bridge.utils.config._config", None)
    monkeypatch.setenv("GEMINI_CLI_WORKING_DIR", "/srv/work")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    config = load_config(tmp_path / "config.json")

    assert config.cli.working_directory == "/srv/work"
    assert config.logging.level == "DEBUG"


def test_setup_logging_accepts_level_names() -> None:
    logger = setup_logging("debug")
    assert logger.level == logging.DEBUG
    assert get_logger("process").name == "cli-bridge.process"
    setup_logging(logging.INFO)


def test_setup_logging_installs_one_handler_and_updates_level() -> None:
    first = setup_logging("INFO")
    second = setup_logging("warning")

    assert first is second
    assert len(second.handlers) == 1
    assert second.handlers[0].level == logging.WARNING
    setup_logging(logging.INFO)


def test_setup_logging_unknown_level_falls_back_to_info() -> None:
    assert setup_logging("chatty").level == logging.INFO


def test_search_timeout_default(tmp_path, monkeypatch) -> None:
    monkeypatch.setattr("cli_bridge.utils.config._config", None)

    config = load_config(tmp_path / "config.json")

    assert config.cli.search_timeout_sec == 60
