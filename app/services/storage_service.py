import asyncio
import re
from abc import ABC, abstractmethod
from datetime import datetime
from io import BytesIO
from pathlib import Path
from typing import Iterable, Optional, Union
from uuid import uuid4

from minio import Minio
from minio.error import S3Error

from app.config.settings import settings
from app.utils.errors import NotFoundError
from app.utils.logging import get_logger

logger = get_logger()

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def build_object_name(suggested_name: str) -> str:
    """Unique storage name that keeps the original file name readable"""
    base_name = Path(suggested_name or "upload").name
    safe_name = _UNSAFE_FILENAME_CHARS.sub("_", base_name).strip("._") or "upload"
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    return f"{uuid4()}_{timestamp}_{safe_name}"


class FileStorage(ABC):
    """Contract for requirement file storage backends. Paths are opaque to callers."""

    @abstractmethod
    async def store(
        self,
        data: bytes,
        suggested_name: str,
        content_type: str = "application/octet-stream",
    ) -> str:
        """Persist bytes and return the storage path"""

    @abstractmethod
    async def delete(self, path: str) -> None:
        """Remove a stored file; absent files are ignored"""

    @abstractmethod
    async def read(self, path: str) -> bytes:
        """Return the stored bytes or raise NotFoundError"""


class LocalFileStorage(FileStorage):
    """Stores files on local disk under UPLOAD_DIR"""

    def __init__(self, base_dir: Optional[Union[str, Path]] = None):
        self.base_dir = Path(base_dir or settings.UPLOAD_DIR)

    def _resolve(self, path: str) -> Path:
        # Stored paths are bare object names; anything else is rejected
        resolved = (self.base_dir / Path(path).name).resolve()
        if resolved.parent != self.base_dir.resolve():
            raise NotFoundError("Stored file not found", "FILE_NOT_FOUND")
        return resolved

    async def store(
        self,
        data: bytes,
        suggested_name: str,
        content_type: str = "application/octet-stream",
    ) -> str:
        object_name = build_object_name(suggested_name)

        def _write_sync():
            self.base_dir.mkdir(parents=True, exist_ok=True)
            (self.base_dir / object_name).write_bytes(data)

        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, _write_sync)

        logger.debug(f"Stored file {object_name} ({len(data)} bytes)")
        return object_name

    async def delete(self, path: str) -> None:
        file_path = self._resolve(path)

        def _delete_sync():
            file_path.unlink(missing_ok=True)

        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, _delete_sync)

    async def read(self, path: str) -> bytes:
        file_path = self._resolve(path)

        def _read_sync():
            try:
                return file_path.read_bytes()
            except FileNotFoundError:
                raise NotFoundError("Stored file not found", "FILE_NOT_FOUND")

        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, _read_sync)


class MinIOStorage(FileStorage):
    """Stores files in a MinIO bucket"""

    def __init__(
        self, client: Optional[Minio] = None, bucket_name: Optional[str] = None
    ):
        self.client = client or Minio(
            endpoint=settings.MINIO_ENDPOINT,
            access_key=settings.MINIO_ACCESS_KEY,
            secret_key=settings.MINIO_SECRET_KEY,
            secure=settings.MINIO_SECURE,
        )
        self.bucket_name = bucket_name or settings.MINIO_BUCKET_NAME
        self._ensure_bucket_exists()

    def _ensure_bucket_exists(self):
        """Ensure the bucket exists, create if it doesn't."""
        if not self.client.bucket_exists(self.bucket_name):
            self.client.make_bucket(self.bucket_name)
            logger.info(f"Created MinIO bucket {self.bucket_name}")

    async def store(
        self,
        data: bytes,
        suggested_name: str,
        content_type: str = "application/octet-stream",
    ) -> str:
        object_name = build_object_name(suggested_name)

        # MinIO client is synchronous
        def _upload_sync():
            return self.client.put_object(
                bucket_name=self.bucket_name,
                object_name=object_name,
                data=BytesIO(data),
                length=len(data),
                content_type=content_type,
            )

        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, _upload_sync)

        logger.debug(f"Uploaded {object_name} to bucket {self.bucket_name}")
        return object_name

    async def delete(self, path: str) -> None:
        def _delete_sync():
            try:
                self.client.remove_object(self.bucket_name, path)
            except S3Error as e:
                if e.code != "NoSuchKey":
                    raise

        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, _delete_sync)

    async def read(self, path: str) -> bytes:
        def _get_object_sync():
            try:
                response = self.client.get_object(self.bucket_name, path)
            except S3Error as e:
                if e.code == "NoSuchKey":
                    raise NotFoundError("Stored file not found", "FILE_NOT_FOUND")
                raise
            try:
                return response.read()
            finally:
                response.close()
                response.release_conn()

        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, _get_object_sync)


async def delete_files_quietly(storage: FileStorage, paths: Iterable[str]) -> None:
    """Best-effort removal of stored files; failures are logged, never raised"""
    for path in paths:
        if not path:
            continue
        try:
            await storage.delete(path)
        except Exception as e:
            logger.warning(f"Failed to delete stored file {path}: {str(e)}")


def get_storage_service() -> FileStorage:
    """Dependency to get the configured file storage backend"""
    if settings.STORAGE_BACKEND == "minio":
        return MinIOStorage()
    return LocalFileStorage()
