from filedownload.config import Config
from filedownload.download import FileDownload
from filedownload.exceptions import (
    FileDownloadError,
    HeadersAlreadySent,
    InvalidInput,
    NotFound,
    OutputBufferError,
    PermissionDenied,
)
from filedownload.main import main, run
from filedownload.mimetypes import MIME_TYPES, get_mime_type
from filedownload.server import Server
from filedownload.sinks import H11Sink, MemorySink, ResponseSink

__version__ = "1.0.0"
__all__ = [
    "main",
    "run",
    "Config",
    "FileDownload",
    "FileDownloadError",
    "H11Sink",
    "HeadersAlreadySent",
    "InvalidInput",
    "MemorySink",
    "MIME_TYPES",
    "NotFound",
    "OutputBufferError",
    "PermissionDenied",
    "ResponseSink",
    "Server",
    "get_mime_type",
]
