"""Storage service for uploaded documents and generated workbooks."""

import shutil
from pathlib import Path
from typing import BinaryIO

import aiofiles

from ctr_invoice.core.config import get_settings

settings = get_settings()


class StorageService:
    """Service for managing file storage."""

    def __init__(self, storage_path: Path | None = None):
        """Initialize storage service."""
        self.storage_path = Path(storage_path or settings.storage_path)
        self._ensure_directories()

    def _ensure_directories(self):
        """Ensure required directories exist."""
        directories = [
            self.storage_path / "invoices",
            self.storage_path / "templates",
            self.storage_path / "outputs",
        ]
        for directory in directories:
            directory.mkdir(parents=True, exist_ok=True)

    def get_invoice_path(self, run_id: str, filename: str) -> Path:
        """Get path for storing an uploaded invoice."""
        return self.storage_path / "invoices" / run_id / Path(filename).name

    def get_template_path(self, run_id: str, filename: str) -> Path:
        """Get path for storing an uploaded CTR template."""
        return self.storage_path / "templates" / run_id / Path(filename).name

    def get_output_path(self, run_id: str) -> Path:
        """Get path for a generated CTR workbook."""
        return self.storage_path / "outputs" / run_id / settings.ctr_output_filename

    async def save_file(
        self,
        file_data: bytes | BinaryIO,
        dest_path: Path,
    ) -> int:
        """
        Save a file and return its size.

        Args:
            file_data: File content as bytes or file-like object
            dest_path: Destination path

        Returns:
            Number of bytes written
        """
        dest_path.parent.mkdir(parents=True, exist_ok=True)

        if hasattr(file_data, "read"):
            # It's a file-like object
            content = file_data.read()
            if hasattr(file_data, "seek"):
                file_data.seek(0)
        else:
            content = file_data

        async with aiofiles.open(dest_path, "wb") as f:
            await f.write(content)

        return len(content)

    def delete_directory(self, dir_path: Path) -> None:
        """Delete a directory and its contents, if present."""
        if dir_path.exists():
            shutil.rmtree(dir_path)

    def get_file_url(self, file_path: Path) -> str:
        """
        Get the URL for accessing a file.

        For local storage, this returns a path relative to the storage root
        that can be served by the API.
        """
        try:
            relative_path = file_path.relative_to(self.storage_path)
            return f"/api/v1/files/{relative_path.as_posix()}"
        except ValueError:
            return str(file_path)


# Singleton instance
storage_service = StorageService()
