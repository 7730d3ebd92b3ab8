from __future__ import annotations

import json
import logging
import socket
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock

import pytest
import yaml
from pytest_mock import MockerFixture

from filedownload.config import Config
from filedownload.download import DEFAULT_CHUNK_SIZE
from filedownload.sinks import DEFAULT_BUFFER_SIZE


@pytest.fixture
def mocked_logging_config_module(mocker: MockerFixture) -> MagicMock:
    return mocker.patch("logging.config")


@pytest.fixture
def json_logging_config(logging_config: dict) -> str:
    return json.dumps(logging_config)


@pytest.fixture
def yaml_logging_config(logging_config: dict) -> str:
    return yaml.dump(logging_config)


def test_config_defaults(greeting_file: Path) -> None:
    config = Config(greeting_file)
    assert config.path == str(greeting_file)
    assert config.filename == "greeting.txt"
    assert config.force_download is True
    assert config.chunk_size == DEFAULT_CHUNK_SIZE
    assert config.buffer_size == DEFAULT_BUFFER_SIZE
    assert config.limit_max_requests is None
    assert config.timeout_keep_alive == 5


def test_config_filename_override(greeting_file: Path) -> None:
    config = Config(greeting_file, filename="hello.txt", force_download=False)
    assert config.filename == "hello.txt"
    assert config.force_download is False


def test_log_config_default(
    greeting_file: Path,
    mocked_logging_config_module: MagicMock,
    logging_config: dict[str, Any],
) -> None:
    config = Config(greeting_file, log_config=logging_config)
    config.configure_logging()
    mocked_logging_config_module.dictConfig.assert_called_with(logging_config)


def test_log_config_json(
    greeting_file: Path,
    mocked_logging_config_module: MagicMock,
    logging_config: dict[str, Any],
    json_logging_config: str,
    tmp_path: Path,
) -> None:
    config_file = tmp_path / "log_config.json"
    config_file.write_text(json_logging_config)
    config = Config(greeting_file, log_config=str(config_file))
    config.configure_logging()
    mocked_logging_config_module.dictConfig.assert_called_with(logging_config)


@pytest.mark.parametrize("config_filename", ["log_config.yml", "log_config.yaml"])
def test_log_config_yaml(
    greeting_file: Path,
    mocked_logging_config_module: MagicMock,
    logging_config: dict[str, Any],
    yaml_logging_config: str,
    tmp_path: Path,
    config_filename: str,
) -> None:
    config_file = tmp_path / config_filename
    config_file.write_text(yaml_logging_config)
    config = Config(greeting_file, log_config=str(config_file))
    config.configure_logging()
    mocked_logging_config_module.dictConfig.assert_called_with(logging_config)


def test_log_config_file(
    greeting_file: Path, mocked_logging_config_module: MagicMock
) -> None:
    config = Config(greeting_file, log_config="log_config")
    config.configure_logging()
    mocked_logging_config_module.fileConfig.assert_called_with(
        "log_config", disable_existing_loggers=False
    )


@pytest.mark.parametrize("use_colors", [True, False])
def test_log_config_use_colors(
    greeting_file: Path, logging_config: dict[str, Any], use_colors: bool
) -> None:
    Config(greeting_file, log_config=logging_config, use_colors=use_colors)
    assert logging_config["formatters"]["default"]["use_colors"] is use_colors
    assert logging_config["formatters"]["access"]["use_colors"] is use_colors


@pytest.mark.parametrize(
    "log_level, expected",
    [("debug", logging.DEBUG), ("trace", 5), (logging.WARNING, logging.WARNING)],
)
def test_log_level(
    greeting_file: Path,
    logging_config: dict[str, Any],
    log_level: Any,
    expected: int,
) -> None:
    Config(greeting_file, log_config=logging_config, log_level=log_level)
    assert logging.getLogger("filedownload.error").level == expected
    assert logging.getLogger("filedownload.access").level == expected
    assert logging.getLevelName(5) == "TRACE"


def test_access_log_disabled(
    greeting_file: Path, logging_config: dict[str, Any]
) -> None:
    Config(greeting_file, log_config=logging_config, access_log=False)
    access_logger = logging.getLogger("filedownload.access")
    assert access_logger.handlers == []
    assert access_logger.propagate is False


def test_bind_socket(
    greeting_file: Path, caplog: pytest.LogCaptureFixture
) -> None:
    config = Config(greeting_file, port=0)
    with caplog.at_level(logging.INFO, logger="filedownload.error"):
        sock = config.bind_socket()
    try:
        host, port = sock.getsockname()[:2]
        assert host == "127.0.0.1"
        assert port != 0
    finally:
        sock.close()
    assert (
        caplog.records[-1].getMessage()
        == "Serving 'greeting.txt' on http://127.0.0.1:%d (Press CTRL+C to quit)" % port
    )


def test_bind_socket_in_use(greeting_file: Path) -> None:
    with socket.socket() as sock:
        sock.bind(("127.0.0.1", 0))
        sock.listen(1)
        port = sock.getsockname()[1]
        config = Config(greeting_file, port=port)
        # SO_REUSEADDR does not allow binding over a listening socket.
        with pytest.raises(SystemExit) as exc_info:
            config.bind_socket().close()
    assert exc_info.value.code == 1
