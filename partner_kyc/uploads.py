# partner_kyc/uploads.py
from __future__ import annotations
import logging
import re
import uuid
from pathlib import Path

from .errors import UploadRejectedError
from .utils import ALLOWED_UPLOAD_TYPES, MAX_UPLOAD_BYTES

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r'[^A-Za-z0-9._-]+')


def validate_upload(content_type: str, size: int, max_bytes: int = MAX_UPLOAD_BYTES) -> None:
    if size > max_bytes:
        raise UploadRejectedError(f"File size exceeds {max_bytes // (1024 * 1024)}MB limit.")
    if content_type not in ALLOWED_UPLOAD_TYPES:
        raise UploadRejectedError("Invalid file type. Please upload PDF, JPEG, or PNG files only.")

def save_upload(name: str, content_type: str, data: bytes, upload_dir: Path) -> str:
    """
    Checks and stores an uploaded document. Returns the reference kept in the
    form record: the stored file name, relative to `upload_dir`.
    """
    validate_upload(content_type, len(data))
    safe_name = _UNSAFE_CHARS.sub('_', Path(name).name).strip('._') or 'document'
    reference = f"{uuid.uuid4().hex}_{safe_name}"

    upload_dir.mkdir(parents=True, exist_ok=True)
    (upload_dir / reference).write_bytes(data)
    logger.info(f"Stored upload '{name}' as '{reference}' ({len(data)} bytes).")
    return reference
