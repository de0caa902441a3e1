import base64
from typing import Optional

from fastapi import UploadFile

from core.errors import InputValidationError


def encode_base64(data: bytes) -> str:
    """Return the base64 text for raw file bytes"""
    return base64.b64encode(data).decode("utf-8")


def strip_data_url_prefix(value: str) -> str:
    """Drop a leading ``data:image/jpeg;base64,`` style prefix if present"""
    if value.startswith("data:") and "," in value:
        return value.split(",", 1)[1]
    return value


def mime_type_from_data_url(value: str) -> Optional[str]:
    if not value.startswith("data:") or ";" not in value:
        return None
    return value[len("data:"):value.index(";")] or None


def to_data_url(base64_data: str, mime_type: str) -> str:
    return f"data:{mime_type};base64,{base64_data}"


def is_image_mime_type(mime_type: Optional[str]) -> bool:
    """Check the declared MIME type only; file contents are not sniffed."""
    return bool(mime_type) and mime_type.lower().startswith("image/")


async def read_upload_bytes(upload: UploadFile, max_size: Optional[int] = None) -> bytes:
    content = await upload.read()
    if max_size is not None and len(content) > max_size:
        raise InputValidationError(f"Image exceeds the maximum upload size of {max_size // (1024 * 1024)}MB.")
    return content


async def read_upload_as_base64(upload: UploadFile, max_size: Optional[int] = None) -> str:
    """Read an uploaded file and return its bytes as base64.

    Read errors propagate to the caller unchanged.
    """
    content = await read_upload_bytes(upload, max_size)
    return encode_base64(content)
