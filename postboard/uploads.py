"""
Image ingest for post uploads.

Files land in a public directory as ``<unix-ms><original filename>`` and are
served back under the configured URL prefix.
"""
import os
import shutil
import time
from pathlib import Path
from typing import Callable, Dict, Iterable, Optional

from fastapi import Depends, UploadFile

from .config import Settings, get_settings
from .logging_config import upload_logger


class ImageIngest:
    """Validates, stores and removes uploaded post images."""

    def __init__(
        self,
        upload_dir: str,
        url_prefix: str = "/uploads",
        allowed_types: Iterable[str] = ("image/png",),
        clock: Callable[[], float] = time.time,
    ):
        self.upload_dir = Path(upload_dir)
        self.url_prefix = url_prefix.rstrip("/")
        self.allowed_types = tuple(allowed_types)
        self.clock = clock

    @classmethod
    def from_settings(cls, settings: Settings) -> "ImageIngest":
        return cls(
            settings.upload_dir,
            url_prefix=settings.upload_url_prefix,
            allowed_types=settings.allowed_image_types,
        )

    @property
    def rejection_message(self) -> str:
        kinds = ", ".join(t.split("/")[-1].upper() for t in self.allowed_types)
        return f"Please, upload only {kinds} images"

    def accepts(self, upload: UploadFile) -> bool:
        """Only the declared MIME type counts, never the extension."""
        return upload.content_type in self.allowed_types

    def make_file_name(self, original_name: Optional[str]) -> str:
        # basename keeps a crafted filename from escaping the upload dir
        return f"{int(self.clock() * 1000)}{os.path.basename(original_name or '')}"

    def path_for(self, file_name: str) -> Path:
        return self.upload_dir / file_name

    def save(self, upload: UploadFile) -> Dict:
        """Write the upload to disk and return its image metadata."""
        file_name = self.make_file_name(upload.filename)
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        target = self.path_for(file_name)

        upload.file.seek(0)
        with open(target, "wb") as out:
            shutil.copyfileobj(upload.file, out)

        meta = {
            "file_name": file_name,
            "mime_type": upload.content_type,
            "file_size": target.stat().st_size,
            "file_path": f"{self.url_prefix}/{file_name}",
        }
        upload_logger.info("Stored image", file_name=file_name, file_size=meta["file_size"])
        return meta

    def remove(self, file_name: Optional[str]) -> bool:
        """Best-effort unlink; failures are logged and reported as False."""
        if not file_name:
            return False
        try:
            self.path_for(file_name).unlink()
        except OSError as e:
            upload_logger.error("Failed to remove image", error=e, file_name=file_name)
            return False
        upload_logger.info("Removed image", file_name=file_name)
        return True


def get_image_ingest(settings: Settings = Depends(get_settings)) -> ImageIngest:
    return ImageIngest.from_settings(settings)
