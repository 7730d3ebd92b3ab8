class FileDownloadError(Exception):
    pass


class InvalidInput(FileDownloadError, TypeError):
    pass


class NotFound(FileDownloadError, FileNotFoundError):
    pass


class PermissionDenied(FileDownloadError, PermissionError):
    pass


class HeadersAlreadySent(FileDownloadError, RuntimeError):
    pass


class OutputBufferError(FileDownloadError, RuntimeError):
    """
    Raised by a sink asked to discard buffered output it does not have.
    """
