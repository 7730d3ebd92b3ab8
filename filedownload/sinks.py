import http
from typing import Callable, List, Optional, Tuple

import h11

from filedownload.exceptions import HeadersAlreadySent, OutputBufferError

DEFAULT_BUFFER_SIZE = 4096


def _get_status_phrase(status_code: int) -> bytes:
    try:
        return http.HTTPStatus(status_code).phrase.encode()
    except ValueError:
        return b""


STATUS_PHRASES = {
    status_code: _get_status_phrase(status_code) for status_code in range(100, 600)
}


class ResponseSink:
    """
    The destination a download is written to.

    Headers are collected until the head is committed. Body bytes are held in
    an output buffer of `buffer_size` bytes; filling it flushes, and the first
    flush commits the head. With `buffer_size=0` every write goes straight
    out and there is no buffer to clear.

    Subclasses implement `emit_head`, `emit_body` and `emit_end`.
    """

    def __init__(
        self, status_code: int = 200, buffer_size: int = DEFAULT_BUFFER_SIZE
    ) -> None:
        self.status_code = status_code
        self.buffer_size = buffer_size
        self.headers: List[Tuple[str, str]] = []
        self.headers_sent = False
        self.finished = False
        self._buffer = bytearray()

    def add_header(self, name: str, value: str, replace: bool = True) -> None:
        if self.headers_sent:
            raise HeadersAlreadySent(
                "Cannot add header '%s', the response head was already sent." % name
            )
        if replace:
            lowered = name.lower()
            self.headers = [
                (key, val) for key, val in self.headers if key.lower() != lowered
            ]
        self.headers.append((name, value))

    def get_headers(self, name: str) -> List[str]:
        lowered = name.lower()
        return [value for key, value in self.headers if key.lower() == lowered]

    def clear_buffer(self) -> None:
        if self.buffer_size <= 0:
            raise OutputBufferError("No output buffer to clear.")
        self._buffer.clear()

    def write(self, data: bytes) -> None:
        self._buffer.extend(data)
        if len(self._buffer) > self.buffer_size:
            self.flush()

    def flush(self) -> None:
        if not self.headers_sent:
            self.emit_head(self.status_code, self.headers)
            self.headers_sent = True
        if self._buffer:
            data = bytes(self._buffer)
            self._buffer.clear()
            self.emit_body(data)

    def finish(self) -> None:
        if self.finished:
            return
        self.flush()
        self.finished = True
        self.emit_end()

    def emit_head(self, status_code: int, headers: List[Tuple[str, str]]) -> None:
        raise NotImplementedError()  # pragma: no cover

    def emit_body(self, data: bytes) -> None:
        raise NotImplementedError()  # pragma: no cover

    def emit_end(self) -> None:
        raise NotImplementedError()  # pragma: no cover


class MemorySink(ResponseSink):
    """
    Keeps the committed response in memory.
    """

    def __init__(
        self, status_code: int = 200, buffer_size: int = DEFAULT_BUFFER_SIZE
    ) -> None:
        super().__init__(status_code=status_code, buffer_size=buffer_size)
        self.sent_headers: Optional[List[Tuple[str, str]]] = None
        self.body = b""

    def emit_head(self, status_code: int, headers: List[Tuple[str, str]]) -> None:
        self.sent_headers = list(headers)

    def emit_body(self, data: bytes) -> None:
        self.body += data

    def emit_end(self) -> None:
        pass


class H11Sink(ResponseSink):
    """
    Serializes the response through an h11 server connection and hands the
    wire bytes to `write`, typically `socket.sendall`.
    """

    def __init__(
        self,
        conn: h11.Connection,
        write: Callable[[bytes], None],
        method: str = "GET",
        status_code: int = 200,
        buffer_size: int = DEFAULT_BUFFER_SIZE,
    ) -> None:
        super().__init__(status_code=status_code, buffer_size=buffer_size)
        self.conn = conn
        self.transport_write = write
        self.method = method
        self.bytes_sent = 0

    def emit_head(self, status_code: int, headers: List[Tuple[str, str]]) -> None:
        reason = STATUS_PHRASES[status_code]
        try:
            raw_headers = [
                (key.encode("latin-1"), value.encode("latin-1"))
                for key, value in headers
            ]
        except UnicodeEncodeError as exc:
            raise ValueError(
                "Response headers must be latin-1 encodable: %s" % exc
            ) from exc
        event = h11.Response(status_code=status_code, headers=raw_headers, reason=reason)
        self.transport_write(self.conn.send(event))

    def emit_body(self, data: bytes) -> None:
        # HEAD responses declare the length but carry no body.
        if self.method == "HEAD":
            return
        self.bytes_sent += len(data)
        self.transport_write(self.conn.send(h11.Data(data=data)))

    def emit_end(self) -> None:
        self.transport_write(self.conn.send(h11.EndOfMessage()))
