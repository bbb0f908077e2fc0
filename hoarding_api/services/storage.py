"""Disk storage for uploaded images, exposed under ``/uploads``."""
import logging
import os
import time
import uuid

from fastapi import UploadFile

from hoarding_api.config import settings
from hoarding_api.utils.exceptions import AppException

logger = logging.getLogger(__name__)

URL_PREFIX = "/uploads"
FOLDERS = ("users", "hoardings", "photos")


def init_storage_dirs() -> None:
    for folder in ("",) + FOLDERS:
        path = os.path.join(settings.upload_dir, folder)
        if not os.path.isdir(path):
            os.makedirs(path, exist_ok=True)
            logger.info("Created upload directory %s", path)


def resolve_stored_path(stored_path: str) -> str:
    """Map a stored ``/uploads/...`` path to a file under the upload directory."""
    root = os.path.realpath(settings.upload_dir)
    relative = stored_path
    if relative.startswith(URL_PREFIX + "/"):
        relative = relative[len(URL_PREFIX) + 1:]
    full_path = os.path.realpath(os.path.join(root, relative.lstrip("/")))
    if os.path.commonpath([root, full_path]) != root:
        raise AppException("Invalid file path", status_code=400)
    return full_path


def remove_stored_file(stored_path: str | None) -> bool:
    if not stored_path:
        return False
    full_path = resolve_stored_path(stored_path)
    if os.path.exists(full_path):
        os.remove(full_path)
        return True
    return False


def _extension(filename: str | None) -> str:
    return os.path.splitext(filename or "")[1].lower()


async def read_image(file: UploadFile) -> bytes:
    """Read an upload, rejecting non-images and files over the size cap."""
    if not (file.content_type or "").startswith("image/"):
        raise AppException("Only image files are allowed", status_code=400)
    content = await file.read()
    if len(content) > settings.max_upload_size_bytes:
        limit_mb = settings.max_upload_size_bytes // (1024 * 1024)
        raise AppException(f"File exceeds the {limit_mb}MB limit", status_code=400)
    return content


def write_file(folder: str, filename: str, content: bytes) -> str:
    directory = os.path.join(settings.upload_dir, folder)
    os.makedirs(directory, exist_ok=True)
    with open(os.path.join(directory, filename), "wb") as f:
        f.write(content)
    return f"{URL_PREFIX}/{folder}/{filename}"


def build_filename(prefix: str, original: str | None) -> str:
    timestamp = int(time.time() * 1000)
    return f"{prefix}-{timestamp}-{uuid.uuid4().hex[:8]}{_extension(original)}"


async def save_image(file: UploadFile, folder: str, prefix: str) -> tuple[str, str, int]:
    """Validate and store an image. Returns (filename, stored path, size in bytes)."""
    content = await read_image(file)
    filename = build_filename(prefix, file.filename)
    stored_path = write_file(folder, filename, content)
    return filename, stored_path, len(content)


def image_format(filename: str | None) -> str | None:
    ext = _extension(filename)
    return ext[1:] if ext else None
