import io
import logging
import os
import tempfile
from typing import IO, Optional, Union

from filedownload.exceptions import (
    HeadersAlreadySent,
    InvalidInput,
    NotFound,
    OutputBufferError,
    PermissionDenied,
)
from filedownload.logging import TRACE_LOG_LEVEL
from filedownload.mimetypes import get_mime_type
from filedownload.sinks import ResponseSink

DEFAULT_CHUNK_SIZE = 64 * 1024

# Content above this size is spilled from memory into an anonymous temp file.
SPOOL_MAX_SIZE = 2 * 1024 * 1024

logger = logging.getLogger("filedownload.error")


def _is_binary_file(file: object) -> bool:
    if isinstance(file, io.TextIOBase):
        return False
    for attr in ("read", "seek", "tell"):
        if not callable(getattr(file, attr, None)):
            return False
    if getattr(file, "closed", False):
        return False
    readable = getattr(file, "readable", None)
    if readable is not None and not readable():
        return False
    seekable = getattr(file, "seekable", None)
    if seekable is not None and not seekable():
        return False
    return True


class FileDownload:
    """
    Sends a file to an HTTP client.

    The instance owns the file object it wraps and closes it in `close()`,
    which is also called when leaving a `with` block.
    """

    def __init__(self, file: IO[bytes], chunk_size: int = DEFAULT_CHUNK_SIZE):
        if not _is_binary_file(file):
            raise InvalidInput(
                "You must pass an open, readable and seekable binary file object."
            )
        self.file = file
        self.chunk_size = chunk_size
        self._file_size: Optional[int] = None

    @classmethod
    def from_path(
        cls, path: Union[str, "os.PathLike[str]"], chunk_size: int = DEFAULT_CHUNK_SIZE
    ) -> "FileDownload":
        if not os.path.isfile(path):
            raise NotFound("File does not exist: '%s'" % os.fspath(path))
        if not os.access(path, os.R_OK):
            raise PermissionDenied(
                "File to download is not readable: '%s'" % os.fspath(path)
            )
        try:
            file = open(path, "rb")
        except PermissionError as exc:
            raise PermissionDenied(
                "File to download is not readable: '%s'" % os.fspath(path)
            ) from exc
        except (FileNotFoundError, IsADirectoryError) as exc:
            # The path changed between the checks and the open.
            raise NotFound("File does not exist: '%s'" % os.fspath(path)) from exc
        return cls(file, chunk_size=chunk_size)

    @classmethod
    def from_string(
        cls,
        content: Union[bytes, bytearray, str],
        encoding: str = "utf-8",
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> "FileDownload":
        if isinstance(content, str):
            content = content.encode(encoding)
        if not isinstance(content, (bytes, bytearray, memoryview)):
            raise InvalidInput(
                "Content must be str or bytes, not %s" % type(content).__name__
            )
        file = tempfile.SpooledTemporaryFile(max_size=SPOOL_MAX_SIZE)
        try:
            file.write(content)
        except BaseException:
            file.close()
            raise
        return cls(file, chunk_size=chunk_size)  # type: ignore[arg-type]

    @property
    def file_size(self) -> int:
        if self._file_size is None:
            position = self.file.tell()
            self.file.seek(0, os.SEEK_END)
            self._file_size = self.file.tell()
            self.file.seek(position)
        return self._file_size

    def send_download(
        self, sink: ResponseSink, filename: str, force_download: bool = True
    ) -> None:
        if sink.headers_sent:
            raise HeadersAlreadySent(
                "Cannot send file to the client, since the headers were already sent."
            )

        mime_type = get_mime_type(filename)
        if force_download:
            disposition = 'attachment; filename="%s";' % filename
        else:
            disposition = 'filename="%s";' % filename

        sink.add_header("Pragma", "public")
        sink.add_header("Expires", "0")
        sink.add_header("Cache-Control", "must-revalidate, post-check=0, pre-check=0")
        sink.add_header("Cache-Control", "private", replace=False)
        sink.add_header("Content-Type", mime_type)
        sink.add_header("Content-Disposition", disposition)
        sink.add_header("Content-Transfer-Encoding", "binary")
        sink.add_header("Content-Length", str(self.file_size))

        discard_buffered_output(sink)

        logger.debug(
            "Sending '%s' (%s, %d bytes)", filename, mime_type, self.file_size
        )
        self.file.seek(0)
        while True:
            chunk = self.file.read(self.chunk_size)
            if not chunk:
                break
            sink.write(chunk)

    def close(self) -> None:
        self.file.close()

    def __enter__(self) -> "FileDownload":
        return self

    def __exit__(self, *args: object) -> None:
        self.close()


def discard_buffered_output(sink: ResponseSink) -> None:
    """
    Drop whatever body output the sink holds unflushed. Best effort: a sink
    without an output buffer is left as it is.
    """
    try:
        sink.clear_buffer()
    except OutputBufferError as exc:
        logger.log(TRACE_LOG_LEVEL, "Output buffer not cleared: %s", exc)
