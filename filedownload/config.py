import json
import logging
import logging.config
import os
import socket
import sys
from typing import Any, Dict, Optional, Union

import click

try:
    import yaml
except ImportError:
    # If the code below that depends on yaml is exercised, it will raise a NameError.
    # Install the PyYAML package or the filedownload[standard] optional dependencies
    # to enable this functionality.
    pass

from filedownload.download import DEFAULT_CHUNK_SIZE
from filedownload.logging import TRACE_LOG_LEVEL
from filedownload.sinks import DEFAULT_BUFFER_SIZE

LOG_LEVELS = {
    "critical": logging.CRITICAL,
    "error": logging.ERROR,
    "warning": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
    "trace": TRACE_LOG_LEVEL,
}

LOGGING_CONFIG: Dict[str, Any] = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "default": {
            "()": "filedownload.logging.DefaultFormatter",
            "fmt": "%(levelprefix)s %(message)s",
            "use_colors": None,
        },
        "access": {
            "()": "filedownload.logging.AccessFormatter",
            "fmt": '%(levelprefix)s %(client_addr)s - "%(request_line)s" %(status_code)s %(bytes_sent)s',  # noqa: E501
        },
    },
    "handlers": {
        "default": {
            "formatter": "default",
            "class": "logging.StreamHandler",
            "stream": "ext://sys.stderr",
        },
        "access": {
            "formatter": "access",
            "class": "logging.StreamHandler",
            "stream": "ext://sys.stdout",
        },
    },
    "loggers": {
        "filedownload": {"handlers": ["default"], "level": "INFO"},
        "filedownload.error": {"level": "INFO"},
        "filedownload.access": {
            "handlers": ["access"],
            "level": "INFO",
            "propagate": False,
        },
    },
}

logger = logging.getLogger("filedownload.error")


class Config:
    def __init__(
        self,
        path: Union[str, "os.PathLike[str]"],
        filename: Optional[str] = None,
        force_download: bool = True,
        host: str = "127.0.0.1",
        port: int = 8000,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        buffer_size: int = DEFAULT_BUFFER_SIZE,
        limit_max_requests: Optional[int] = None,
        backlog: int = 2048,
        timeout_keep_alive: float = 5,
        log_config: Optional[Union[Dict[str, Any], str]] = LOGGING_CONFIG,
        log_level: Optional[Union[str, int]] = None,
        access_log: bool = True,
        use_colors: Optional[bool] = None,
    ):
        self.path = os.fspath(path)
        self.filename = filename or os.path.basename(self.path)
        self.force_download = force_download
        self.host = host
        self.port = port
        self.chunk_size = chunk_size
        self.buffer_size = buffer_size
        self.limit_max_requests = limit_max_requests
        self.backlog = backlog
        self.timeout_keep_alive = timeout_keep_alive
        self.log_config = log_config
        self.log_level = log_level
        self.access_log = access_log
        self.use_colors = use_colors

        self.configure_logging()

    def configure_logging(self) -> None:
        logging.addLevelName(TRACE_LOG_LEVEL, "TRACE")

        if self.log_config is not None:
            if isinstance(self.log_config, dict):
                if self.use_colors in (True, False):
                    self.log_config["formatters"]["default"][
                        "use_colors"
                    ] = self.use_colors
                    self.log_config["formatters"]["access"][
                        "use_colors"
                    ] = self.use_colors
                logging.config.dictConfig(self.log_config)
            elif self.log_config.endswith(".json"):
                with open(self.log_config) as file:
                    loaded_config = json.load(file)
                    logging.config.dictConfig(loaded_config)
            elif self.log_config.endswith((".yaml", ".yml")):
                with open(self.log_config) as file:
                    loaded_config = yaml.safe_load(file)
                    logging.config.dictConfig(loaded_config)
            else:
                # See the note about fileConfig() here:
                # https://docs.python.org/3/library/logging.config.html#configuration-file-format
                logging.config.fileConfig(
                    self.log_config, disable_existing_loggers=False
                )

        if self.log_level is not None:
            if isinstance(self.log_level, str):
                log_level = LOG_LEVELS[self.log_level]
            else:
                log_level = self.log_level
            logging.getLogger("filedownload.error").setLevel(log_level)
            logging.getLogger("filedownload.access").setLevel(log_level)
        if self.access_log is False:
            logging.getLogger("filedownload.access").handlers = []
            logging.getLogger("filedownload.access").propagate = False

    def bind_socket(self) -> socket.socket:
        family = socket.AF_INET
        addr_format = "%s://%s:%d"

        if self.host and ":" in self.host:
            # It's an IPv6 address.
            family = socket.AF_INET6
            addr_format = "%s://[%s]:%d"

        sock = socket.socket(family=family)
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        try:
            sock.bind((self.host, self.port))
        except OSError as exc:
            logger.error(exc)
            sys.exit(1)
        sock.listen(self.backlog)

        port = sock.getsockname()[1]
        message = f"Serving '%s' on {addr_format} (Press CTRL+C to quit)"
        color_message = (
            "Serving '%s' on "
            + click.style(addr_format, bold=True)
            + " (Press CTRL+C to quit)"
        )
        logger.info(
            message,
            self.filename,
            "http",
            self.host,
            port,
            extra={"color_message": color_message},
        )
        return sock
