import logging
from pathlib import Path

import pytest

from expense_categorizer.logger import ColourizedFormatter, get_logging_config


def test_formatter_colours_level_without_mutating_record() -> None:
    formatter = ColourizedFormatter("%(levelname)s %(message)s")
    record = logging.LogRecord("test", logging.WARNING, __file__, 1, "careful", None, None)

    output = formatter.format(record)

    assert output == f"{ColourizedFormatter.YELLOW}WARNING{ColourizedFormatter.RESET} careful"
    assert record.levelname == "WARNING"


def test_logging_config_levels_and_file_handler(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("LOG_LEVEL", "debug")
    monkeypatch.setenv("LOG_DIR", str(tmp_path / "logs"))

    config = get_logging_config()

    assert config["loggers"][""]["level"] == "DEBUG"
    assert config["loggers"][""]["handlers"] == ["console", "file"]
    assert config["handlers"]["file"]["filename"].startswith(str(tmp_path / "logs"))
    assert (tmp_path / "logs").is_dir()
    assert config["loggers"]["uvicorn.access"]["propagate"] is False


def test_logging_config_console_only(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("LOG_DIR", raising=False)
    monkeypatch.delenv("LOG_LEVEL", raising=False)

    config = get_logging_config()

    assert config["loggers"][""]["level"] == "INFO"
    assert "file" not in config["handlers"]
