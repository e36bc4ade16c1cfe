"""
Image file helpers: extension allow-list, content types and captions.
"""

import os

IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png", ".gif", ".bmp", ".webp")

CONTENT_TYPES = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".webp": "image/webp",
    ".bmp": "image/bmp",
}
DEFAULT_CONTENT_TYPE = "image/jpeg"


def file_extension(filename: str) -> str:
    """Lower-cased extension including the dot, or '' when there is none."""
    return os.path.splitext(filename or "")[1].lower()


def is_image_file(filename: str) -> bool:
    """Case-insensitive check against the image extension allow-list."""
    return file_extension(filename) in IMAGE_EXTENSIONS


def content_type_for(filename: str) -> str:
    return CONTENT_TYPES.get(file_extension(filename), DEFAULT_CONTENT_TYPE)


def caption_for(filename: str) -> str:
    """File name without its last extension."""
    return os.path.splitext(filename)[0]


def base_name(path: str) -> str:
    """Last path segment of a blob name or a caller-supplied file name."""
    return (path or "").replace("\\", "/").rstrip("/").split("/")[-1]
