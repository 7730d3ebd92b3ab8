import logging
import os
import signal
import socket
import sys
import threading
import traceback
from email.utils import formatdate
from types import FrameType
from typing import List, Optional, Tuple

import click
import h11

from filedownload.config import Config
from filedownload.download import FileDownload
from filedownload.exceptions import FileDownloadError
from filedownload.sinks import STATUS_PHRASES, H11Sink

HANDLED_SIGNALS = (
    signal.SIGINT,  # Unix signal 2. Sent by Ctrl+C.
    signal.SIGTERM,  # Unix signal 15. Sent by `kill <pid>`.
)

MAX_RECV = 2**16
ACCEPT_TIMEOUT = 0.5

logger = logging.getLogger("filedownload.error")
access_logger = logging.getLogger("filedownload.access")


def _get_default_headers() -> List[Tuple[str, str]]:
    return [
        ("Server", "filedownload"),
        ("Date", formatdate(usegmt=True)),
        ("Connection", "close"),
    ]


def _format_client(client: Tuple[str, int]) -> str:
    return "%s:%d" % (client[0], client[1])


class Server:
    """
    Serves a single file over HTTP/1.1, one request per connection.
    """

    def __init__(self, config: Config) -> None:
        self.config = config
        self.total_requests = 0
        self.started = False
        self.should_exit = False

    def run(self, sock: Optional[socket.socket] = None) -> None:
        process_id = os.getpid()
        config = self.config

        message = "Started server process [%d]"
        color_message = "Started server process [" + click.style("%d", fg="cyan") + "]"
        logger.info(message, process_id, extra={"color_message": color_message})

        try:
            FileDownload.from_path(config.path).close()
        except FileDownloadError as exc:
            logger.error("Error loading file. %s", exc)
            sys.exit(1)

        self.install_signal_handlers()

        if sock is None:
            sock = config.bind_socket()
        sock.settimeout(ACCEPT_TIMEOUT)
        self.started = True

        try:
            self.main_loop(sock)
        finally:
            sock.close()

        message = "Finished server process [%d]"
        color_message = "Finished server process [" + click.style("%d", fg="cyan") + "]"
        logger.info(message, process_id, extra={"color_message": color_message})

    def main_loop(self, sock: socket.socket) -> None:
        while not self.should_exit:
            try:
                connection, client = sock.accept()
            except socket.timeout:
                continue
            connection.settimeout(self.config.timeout_keep_alive)
            try:
                self.handle_connection(connection, client)
            finally:
                connection.close()

            if (
                self.config.limit_max_requests is not None
                and self.total_requests >= self.config.limit_max_requests
            ):
                logger.warning(
                    "Maximum request limit of %d exceeded. Terminating process.",
                    self.config.limit_max_requests,
                )
                self.should_exit = True

        logger.info("Shutting down")

    def handle_connection(
        self, connection: socket.socket, client: Tuple[str, int]
    ) -> None:
        conn = h11.Connection(h11.SERVER)
        try:
            request = self.receive_request(conn, connection)
        except OSError:
            logger.debug("%s - Disconnected", _format_client(client))
            return
        except h11.RemoteProtocolError as exc:
            logger.warning("Invalid HTTP request received.")
            if conn.our_state in (h11.IDLE, h11.SEND_RESPONSE):
                self.send_plain_response(
                    conn,
                    connection,
                    client,
                    "-",
                    "-",
                    "1.1",
                    exc.error_status_hint,
                    STATUS_PHRASES[exc.error_status_hint],
                )
            return

        if request is None:
            return

        method = request.method.decode("ascii")
        path = request.target.decode("ascii")
        http_version = request.http_version.decode("ascii")

        if method not in ("GET", "HEAD"):
            self.send_plain_response(
                conn,
                connection,
                client,
                method,
                path,
                http_version,
                405,
                b"Method Not Allowed",
                extra_headers=[("Allow", "GET, HEAD")],
            )
            return

        sink = H11Sink(
            conn, connection.sendall, method=method, buffer_size=self.config.buffer_size
        )
        for name, value in _get_default_headers():
            sink.add_header(name, value)

        try:
            with FileDownload.from_path(
                self.config.path, chunk_size=self.config.chunk_size
            ) as download:
                download.send_download(
                    sink, self.config.filename, self.config.force_download
                )
            sink.finish()
        except Exception:
            msg = "Exception while sending download\n%s"
            logger.error(msg, traceback.format_exc())
            if not sink.headers_sent and conn.our_state is h11.SEND_RESPONSE:
                self.send_plain_response(
                    conn,
                    connection,
                    client,
                    method,
                    path,
                    http_version,
                    500,
                    b"Internal Server Error",
                )
            return

        self.close_connection(conn, connection)
        self.total_requests += 1
        access_logger.info(
            '%s - "%s %s HTTP/%s" %d %d',
            _format_client(client),
            method,
            path,
            http_version,
            sink.status_code,
            sink.bytes_sent,
        )

    def receive_request(
        self, conn: h11.Connection, connection: socket.socket
    ) -> Optional[h11.Request]:
        while True:
            event = conn.next_event()
            if event is h11.NEED_DATA:
                conn.receive_data(connection.recv(MAX_RECV))
            elif isinstance(event, h11.Request):
                return event
            elif isinstance(event, h11.ConnectionClosed):
                return None

    def send_plain_response(
        self,
        conn: h11.Connection,
        connection: socket.socket,
        client: Tuple[str, int],
        method: str,
        path: str,
        http_version: str,
        status_code: int,
        body: bytes,
        extra_headers: Optional[List[Tuple[str, str]]] = None,
    ) -> None:
        sink = H11Sink(conn, connection.sendall, method=method, status_code=status_code)
        for name, value in _get_default_headers() + (extra_headers or []):
            sink.add_header(name, value)
        sink.add_header("Content-Type", "text/plain; charset=utf-8")
        sink.add_header("Content-Length", str(len(body)))
        sink.write(body)
        sink.finish()
        self.close_connection(conn, connection)
        self.total_requests += 1
        access_logger.info(
            '%s - "%s %s HTTP/%s" %d %d',
            _format_client(client),
            method,
            path,
            http_version,
            status_code,
            sink.bytes_sent,
        )

    def close_connection(self, conn: h11.Connection, connection: socket.socket) -> None:
        if conn.our_state is h11.MUST_CLOSE:
            conn.send(h11.ConnectionClosed())
        try:
            connection.shutdown(socket.SHUT_WR)
        except OSError:
            # Premature client disconnect
            pass

    def install_signal_handlers(self) -> None:
        if threading.current_thread() is not threading.main_thread():
            # Signals can only be listened to from the main thread.
            return

        for sig in HANDLED_SIGNALS:
            signal.signal(sig, self.handle_exit)

    def handle_exit(self, sig: int, frame: Optional[FrameType]) -> None:
        self.should_exit = True
