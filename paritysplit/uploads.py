"""Upload validation and transient storage of incoming PDFs."""

import asyncio
from pathlib import Path, PurePath
from typing import BinaryIO

import structlog
from starlette.datastructures import UploadFile

from paritysplit.config import settings
from paritysplit.storage import new_stamp

logger = structlog.get_logger()

CHUNK_SIZE = 1024 * 1024


class ClientInputError(Exception):
    """Exception raised when an upload is rejected before processing."""

    status_code = 400

    def __init__(self, code: str, message: str) -> None:
        self.code = code
        self.message = message
        super().__init__(message)


class UploadTooLargeError(ClientInputError):
    """Raised when an upload exceeds the configured size limit."""

    status_code = 413


def safe_filename(filename: str) -> str:
    """Strip any directory components a client put in the filename."""
    return PurePath(filename.replace("\\", "/")).name


class UploadHandler:
    """Validates uploaded files and stores them under unique names."""

    def __init__(
        self,
        upload_dir: Path = Path(settings.upload_dir),
        allowed_extension: str = settings.allowed_extension,
        max_size_mb: int = settings.max_input_size_mb,
    ) -> None:
        """
        Initialize upload handler.

        Args:
            upload_dir: Transient directory uploads are written to
            allowed_extension: Required filename extension, compared case-insensitively
            max_size_mb: Max accepted upload size in MB
        """
        self._upload_dir = upload_dir
        self._extension = allowed_extension.lower()
        self._max_bytes = max_size_mb * 1024 * 1024

    def validate(self, upload: UploadFile | str | None) -> str:
        """
        Check that a file was attached and has the expected extension.

        Returns:
            The sanitized original filename

        Raises:
            ClientInputError: If no file is attached or its extension is wrong
        """
        if not isinstance(upload, UploadFile) or not upload.filename:
            raise ClientInputError(code="NO_FILE", message="No file uploaded.")

        filename = safe_filename(upload.filename)
        if Path(filename).suffix.lower() != self._extension:
            logger.warning("Rejected upload with wrong extension", filename=filename)
            raise ClientInputError(
                code="INVALID_EXTENSION",
                message="Only PDF files are allowed!",
            )
        return filename

    async def save(self, upload: UploadFile | str | None) -> Path:
        """
        Validate an upload and persist its bytes to the upload directory.

        Args:
            upload: Form value from the request, anything but a file is rejected

        Returns:
            Path of the stored file

        Raises:
            ClientInputError: If validation fails, nothing is written
            UploadTooLargeError: If the file exceeds the size limit
        """
        filename = self.validate(upload)
        stored_path = self._upload_dir / f"{new_stamp()}-{filename}"

        size = await asyncio.to_thread(self._write, upload.file, stored_path)

        logger.info("Upload stored", path=str(stored_path), size_bytes=size)
        return stored_path

    def _write(self, source: BinaryIO, stored_path: Path) -> int:
        """Copy the upload to disk in chunks, removing it if the limit is hit."""
        size = 0
        try:
            with open(stored_path, "wb") as f:
                while chunk := source.read(CHUNK_SIZE):
                    size += len(chunk)
                    if size > self._max_bytes:
                        raise UploadTooLargeError(
                            code="FILE_TOO_LARGE",
                            message=f"Upload exceeds {self._max_bytes // (1024 * 1024)}MB limit.",
                        )
                    f.write(chunk)
        except Exception:
            stored_path.unlink(missing_ok=True)
            raise
        return size


# Global upload handler instance
upload_handler = UploadHandler()
