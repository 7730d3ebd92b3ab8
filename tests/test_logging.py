import http
import logging

import click
import pytest

from filedownload.logging import TRACE_LOG_LEVEL, AccessFormatter, DefaultFormatter


def make_record(msg: str, args: tuple, level: int = logging.INFO, **extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="filedownload.access",
        level=level,
        pathname=__file__,
        lineno=1,
        msg=msg,
        args=args,
        exc_info=None,
    )
    record.__dict__.update(extra)
    return record


ACCESS_ARGS = ("127.0.0.1:51234", "GET", "/", "1.1", 200, 11)


def test_default_formatter_without_colors() -> None:
    formatter = DefaultFormatter(fmt="%(levelprefix)s %(message)s", use_colors=False)
    record = make_record("Shutting down", ())
    assert formatter.format(record) == "INFO:     Shutting down"


def test_default_formatter_uses_color_message() -> None:
    formatter = DefaultFormatter(fmt="%(levelprefix)s %(message)s", use_colors=True)
    color_message = "Started server process [" + click.style("%d", fg="cyan") + "]"
    record = make_record(
        "Started server process [%d]", (42,), color_message=color_message
    )
    formatted = formatter.format(record)
    assert click.style("INFO", fg="green") in formatted
    assert click.style("42", fg="cyan") in formatted


def test_trace_level_color() -> None:
    formatter = DefaultFormatter(fmt="%(levelprefix)s %(message)s", use_colors=True)
    logging.addLevelName(TRACE_LOG_LEVEL, "TRACE")
    record = make_record("detail", (), level=TRACE_LOG_LEVEL)
    assert formatter.format(record).startswith(click.style("TRACE", fg="blue"))


def test_access_formatter_without_colors() -> None:
    formatter = AccessFormatter(
        fmt='%(levelprefix)s %(client_addr)s - "%(request_line)s" %(status_code)s %(bytes_sent)s',
        use_colors=False,
    )
    record = make_record('%s - "%s %s HTTP/%s" %d %d', ACCESS_ARGS)
    assert (
        formatter.format(record)
        == 'INFO:     127.0.0.1:51234 - "GET / HTTP/1.1" 200 OK 11'
    )


@pytest.mark.parametrize(
    "status_code, colour",
    [(200, "green"), (304, "yellow"), (405, "red"), (500, "bright_red")],
)
def test_access_formatter_status_colours(status_code: int, colour: str) -> None:
    formatter = AccessFormatter(fmt="%(status_code)s", use_colors=True)
    status = formatter.get_status_code(status_code)
    phrase = "%d %s" % (status_code, http.HTTPStatus(status_code).phrase)
    assert status == click.style(phrase, fg=colour)


def test_access_formatter_unknown_status() -> None:
    formatter = AccessFormatter(fmt="%(status_code)s", use_colors=False)
    assert formatter.get_status_code(599) == "599 "
