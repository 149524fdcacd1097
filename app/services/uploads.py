"""Upload validation and naming shared by bill and photo uploads."""

import random
import string
import time
from datetime import datetime
from typing import Optional

MAX_FILE_SIZE = 10 * 1024 * 1024  # 10MB
ALLOWED_TYPES = {"application/pdf", "image/jpeg", "image/png", "image/jpg"}
PHOTO_TYPES = {"image/jpeg", "image/png", "image/jpg", "image/heic", "image/webp"}

INVALID_TYPE_MESSAGE = "Invalid file type. Please upload a PDF, JPG, or PNG file."
TOO_LARGE_MESSAGE = "File too large. Please upload a file smaller than 10MB."


def validate_upload(content_type: Optional[str], size: int, allowed: set[str] = ALLOWED_TYPES) -> Optional[str]:
    """Return an error message, or None when the file is acceptable."""
    if content_type not in allowed:
        return INVALID_TYPE_MESSAGE
    if size > MAX_FILE_SIZE:
        return TOO_LARGE_MESSAGE
    return None


def file_extension(filename: Optional[str]) -> str:
    if not filename or "." not in filename:
        return "unknown"
    return filename.rsplit(".", 1)[1].lower() or "unknown"


def bill_file_name(original_name: Optional[str], now: Optional[datetime] = None) -> str:
    """``bill-<ISO timestamp with : and . as ->-<random>.<ext>``."""
    timestamp = (now or datetime.utcnow()).isoformat(timespec="milliseconds").replace(":", "-").replace(".", "-")
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=11))
    return f"bill-{timestamp}Z-{suffix}.{file_extension(original_name)}"


def photo_blob_path(submission_type: str, submission_id: str, index: int, original_name: Optional[str]) -> str:
    """``photo-submissions/<type>/<submission>_<epoch ms>_<n>.<ext>``, n starting at 1."""
    millis = int(time.time() * 1000)
    return f"photo-submissions/{submission_type}/{submission_id}_{millis}_{index + 1}.{file_extension(original_name)}"
