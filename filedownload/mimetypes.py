from types import MappingProxyType
from typing import Mapping

DEFAULT_MIME_TYPE = "application/force-download"

MIME_TYPES: Mapping[str, str] = MappingProxyType(
    {
        "7z": "application/octet-stream",
        "ai": "application/illustrator",
        "avi": "video/x-msvideo",
        "bmp": "image/bmp",
        "cab": "application/vnd.ms-cab-compressed",
        "css": "text/css",
        "diff": "text/x-patch",
        "doc": "application/msword",
        "docm": "application/vnd.ms-word.document.macroEnabled.12",
        "docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",  # noqa: E501
        "dot": "application/msword",
        "dotm": "application/vnd.ms-word.template.macroEnabled.12",
        "dotx": "application/vnd.openxmlformats-officedocument.wordprocessingml.template",  # noqa: E501
        "eps": "application/postscript",
        "exe": "application/x-msdownload",
        "flv": "video/x-flv",
        "gif": "image/gif",
        "htm": "text/html",
        "html": "text/html",
        "ico": "image/vnd.microsoft.icon",
        "jpe": "image/jpeg",
        "jpeg": "image/jpeg",
        "jpg": "image/jpeg",
        "js": "application/javascript",
        "json": "application/json",
        "mov": "video/quicktime",
        "mp3": "audio/mpeg",
        "mpe": "video/mpeg",
        "mpeg": "video/mpeg",
        "mpg": "video/mpeg",
        "msi": "application/x-msdownload",
        "ods": "application/vnd.oasis.opendocument.spreadsheet",
        "odt": "application/vnd.oasis.opendocument.text",
        "pdf": "application/pdf",
        "php": "text/html",
        "png": "image/png",
        "pot": "application/vnd.ms-powerpoint",
        "potm": "application/vnd.ms-powerpoint.presentation.macroEnabled.12",
        "potx": "application/vnd.openxmlformats-officedocument.presentationml.template",  # noqa: E501
        "ppa": "application/vnd.ms-powerpoint",
        "ppam": "application/vnd.ms-powerpoint.addin.macroEnabled.12",
        "pps": "application/vnd.ms-powerpoint",
        "ppsm": "application/vnd.ms-powerpoint.slideshow.macroEnabled.12",
        "ppsx": "application/vnd.openxmlformats-officedocument.presentationml.slideshow",  # noqa: E501
        "ppt": "application/vnd.ms-powerpoint",
        "pptm": "application/vnd.ms-powerpoint.presentation.macroEnabled.12",
        "pptx": "application/vnd.openxmlformats-officedocument.presentationml.presentation",  # noqa: E501
        "ps": "application/postscript",
        "psd": "image/vnd.adobe.photoshop",
        "qt": "video/quicktime",
        "rar": "application/x-rar-compressed",
        "rtf": "application/rtf",
        "svg": "image/svg+xml",
        "svgz": "image/svg+xml",
        "swf": "application/x-shockwave-flash",
        "tif": "image/tiff",
        "tiff": "image/tiff",
        "txt": "text/plain",
        "wav": "audio/x-wav",
        "xla": "application/vnd.ms-excel",
        "xlam": "application/vnd.ms-excel.addin.macroEnabled.12",
        "xls": "application/vnd.ms-excel",
        "xlsb": "application/vnd.ms-excel.sheet.binary.macroEnabled.12",
        "xlsm": "application/vnd.ms-excel.sheet.macroEnabled.12",
        "xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        "xlt": "application/vnd.ms-excel",
        "xltm": "application/vnd.ms-excel.template.macroEnabled.12",
        "xltx": "application/vnd.openxmlformats-officedocument.spreadsheetml.template",  # noqa: E501
        "xml": "application/xml",
        "zip": "application/zip",
    }
)


def get_extension(filename: str) -> str:
    """
    Return the text after the last dot of the final path component, or an
    empty string when that component has no dot.
    """
    basename = filename.rpartition("/")[2]
    _, dot, extension = basename.rpartition(".")
    return extension if dot else ""


def get_mime_type(filename: str) -> str:
    # Lookup is case-sensitive: "report.PDF" is not in the table.
    return MIME_TYPES.get(get_extension(filename), DEFAULT_MIME_TYPE)
