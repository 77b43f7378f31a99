"""
Content type resolution for served objects.

Precedence, first match wins:
1. Content-Type reported by the storage backend
2. File extension lookup in CONTENT_TYPES
3. application/octet-stream

Pure functions only; no logging here so results are trivially repeatable.
"""

from typing import Mapping, Optional

DEFAULT_CONTENT_TYPE = "application/octet-stream"

CONTENT_TYPES: dict[str, str] = {
    # Text formats
    "html": "text/html",
    "htm": "text/html",
    "css": "text/css",
    "js": "application/javascript",
    "json": "application/json",
    "xml": "application/xml",
    "txt": "text/plain",
    "csv": "text/csv",
    "md": "text/markdown",

    # Document formats
    "pdf": "application/pdf",
    "doc": "application/msword",
    "docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "xls": "application/vnd.ms-excel",
    "xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "ppt": "application/vnd.ms-powerpoint",
    "pptx": "application/vnd.openxmlformats-officedocument.presentationml.presentation",

    # Image formats
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "gif": "image/gif",
    "svg": "image/svg+xml",
    "webp": "image/webp",
    "ico": "image/x-icon",
    "bmp": "image/bmp",
    "tiff": "image/tiff",
    "tif": "image/tiff",

    # Video formats
    "mp4": "video/mp4",
    "webm": "video/webm",
    "avi": "video/x-msvideo",
    "mov": "video/quicktime",
    "wmv": "video/x-ms-wmv",
    "flv": "video/x-flv",

    # Audio formats
    "mp3": "audio/mpeg",
    "wav": "audio/wav",
    "ogg": "audio/ogg",
    "aac": "audio/aac",
    "flac": "audio/flac",

    # Archive formats
    "zip": "application/zip",
    "tar": "application/x-tar",
    "gz": "application/gzip",
    "bz2": "application/x-bzip2",
    "7z": "application/x-7z-compressed",
    "rar": "application/vnd.rar",

    # Font formats
    "woff": "font/woff",
    "woff2": "font/woff2",
    "ttf": "font/ttf",
    "otf": "font/otf",
    "eot": "application/vnd.ms-fontobject",

    # Binary formats
    "bin": "application/octet-stream",
    "exe": "application/x-msdownload",
    "dmg": "application/x-apple-diskimage",
    "iso": "application/x-iso9660-image",
}

_HEADER_NAMES = ("content-type", "Content-Type")


def file_extension(path: str) -> str:
    """
    Lower-cased extension of the last path component, or "".

    "a/b.tar.gz" -> "gz", "a.d/readme" -> "", ".env" -> "", "file." -> "".
    """
    name = path.rstrip("/").rsplit("/", 1)[-1]
    stem, dot, extension = name.rpartition(".")
    if not dot or not stem:
        return ""
    return extension.lower()


def header_content_type(headers: Optional[Mapping[str, str]]) -> Optional[str]:
    """Content type from backend headers, trying the common casings first."""
    if not headers:
        return None

    for name in _HEADER_NAMES:
        if name in headers:
            return headers[name]

    for name, value in headers.items():
        if name.lower() == "content-type":
            return value

    return None


def resolve_content_type(
    requested_path: str,
    storage_headers: Optional[Mapping[str, str]] = None,
) -> str:
    """
    Decide the Content-Type for a served object.

    A backend-provided value is returned verbatim, regardless of the
    path's extension. Otherwise the extension table decides, falling
    back to application/octet-stream.
    """
    from_headers = header_content_type(storage_headers)
    if from_headers is not None:
        return from_headers

    return CONTENT_TYPES.get(file_extension(requested_path), DEFAULT_CONTENT_TYPE)
