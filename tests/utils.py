from __future__ import annotations

import contextlib
import logging
import threading
import time
import typing

import pytest

from filedownload.config import Config
from filedownload.server import Server


@contextlib.contextmanager
def run_server(config: Config) -> typing.Iterator[str]:
    """Serve `config` from a background thread and yield the base URL."""
    server = Server(config=config)
    sock = config.bind_socket()
    host, port = sock.getsockname()[:2]
    thread = threading.Thread(target=server.run, kwargs={"sock": sock})
    thread.start()
    while not server.started and thread.is_alive():
        time.sleep(0.01)
    try:
        yield f"http://{host}:{port}"
    finally:
        server.should_exit = True
        thread.join(timeout=5)


@contextlib.contextmanager
def caplog_for_logger(
    caplog: pytest.LogCaptureFixture, logger_name: str
) -> typing.Iterator[pytest.LogCaptureFixture]:
    logger = logging.getLogger(logger_name)
    logger.propagate, old_propagate = False, logger.propagate
    logger.addHandler(caplog.handler)
    try:
        yield caplog
    finally:
        logger.removeHandler(caplog.handler)
        logger.propagate = old_propagate
