from __future__ import annotations

from .schemas import MediaKind

_SIZE_UNITS = ("Bytes", "KB", "MB", "GB")
_KIND_LABELS = {
    "image": "Image",
    "video": "Video",
    "audio": "Audio",
    "document": "Document",
}


def classify_media_kind(content_type: str) -> MediaKind:
    normalized = (content_type or "").strip().lower()
    if normalized.startswith("image/"):
        return "image"
    if normalized.startswith("video/"):
        return "video"
    if normalized.startswith("audio/"):
        return "audio"
    return "document"


def media_kind_label(kind: str) -> str:
    return _KIND_LABELS.get(kind, "File")


def _trim_number(value: float) -> str:
    rendered = f"{value:.2f}".rstrip("0").rstrip(".")
    return rendered or "0"


def format_file_size(size_bytes: int) -> str:
    """Render a byte count in base-1024 units, e.g. `1.5 KB` or `2 MB`."""
    if size_bytes <= 0:
        return "0 Bytes"
    value = float(size_bytes)
    index = 0
    while value >= 1024 and index < len(_SIZE_UNITS) - 1:
        value /= 1024
        index += 1
    return f"{_trim_number(value)} {_SIZE_UNITS[index]}"


def format_megabytes(size_bytes: int) -> str:
    return f"{_trim_number(size_bytes / (1024 * 1024))}MB"
