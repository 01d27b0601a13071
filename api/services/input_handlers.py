"""
Input handling for uploaded distribution workbooks
"""
import logging
from pathlib import Path
from typing import BinaryIO

from src.sheet_ingestion import InvalidFileFormatError
from src.sheet_ingestion.workbook_reader import validate_extension

logger = logging.getLogger(__name__)


class UploadRejected(ValueError):
    """Raised when an upload fails basic validation"""
    pass


def read_upload(file: BinaryIO, filename: str, max_size: int) -> bytes:
    """
    Read an uploaded workbook into memory

    Uploads are parsed in memory and never written to disk; the workbook
    lives only as long as its import session.

    Args:
        file: Uploaded file stream
        filename: Client-supplied file name
        max_size: Maximum size in bytes

    Returns:
        File contents

    Raises:
        UploadRejected: If the extension is not allowed, the file is empty
            or larger than max_size
    """
    safe_filename = Path(filename or "").name
    try:
        validate_extension(safe_filename)
    except InvalidFileFormatError as e:
        raise UploadRejected(str(e))

    # One byte past the limit marks the file as oversize
    data = file.read(max_size + 1)
    if len(data) > max_size:
        raise UploadRejected(
            f"File too large: exceeded {max_size / 1024 / 1024:.0f}MB"
        )
    if not data:
        raise UploadRejected(f"Uploaded file is empty: {safe_filename}")

    logger.info(f"Received upload: {safe_filename} ({len(data) / 1024:.1f}KB)")
    return data
