import os
import uuid
import shutil
import logging
import tempfile
from pathlib import Path
from typing import Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from fastapi import UploadFile

from .config import Settings
from .exceptions import StorageError

logger = logging.getLogger(__name__)


def generate_filename(original_filename: str) -> str:
    """Unique name for an upload, keeping the original extension."""
    file_extension = os.path.splitext(original_filename or "")[1].lower()
    return f"{uuid.uuid4().hex}{file_extension}"


def get_upload_size(upload: UploadFile) -> int:
    """Size in bytes of an uploaded file."""
    if upload.size is not None:
        return upload.size
    upload.file.seek(0, os.SEEK_END)
    size = upload.file.tell()
    upload.file.seek(0)
    return size


class FileStorage:
    """Saves and removes uploaded images under generated unique names."""

    def save(self, upload: UploadFile) -> str:
        raise NotImplementedError

    def delete(self, filename: str) -> bool:
        """Remove a stored file. Returns False when it was already gone."""
        raise NotImplementedError

    def exists(self, filename: str) -> bool:
        raise NotImplementedError

    def url(self, filename: str) -> str:
        raise NotImplementedError


class LocalStorage(FileStorage):
    """Handles file storage in a local uploads directory"""

    # Mode given to every stored file
    FILE_MODE = 0o644

    def __init__(self, directory: str, url_path: str = "/uploads", base_url: str = ""):
        self.directory = Path(directory)
        self.url_path = url_path.rstrip("/")
        self.base_url = base_url.rstrip("/")

    def path_for(self, filename: str) -> Path:
        # Only bare filenames are ever stored, never paths
        return self.directory / Path(filename).name

    def save(self, upload: UploadFile) -> str:
        self.directory.mkdir(parents=True, exist_ok=True)
        filename = generate_filename(upload.filename)
        target = self.path_for(filename)

        # Write next to the target and rename, so the file is either complete or absent
        tmp = tempfile.NamedTemporaryFile(dir=self.directory, prefix=".upload-", delete=False)
        try:
            with tmp:
                upload.file.seek(0)
                shutil.copyfileobj(upload.file, tmp)
            # Temp files are created owner-only
            os.chmod(tmp.name, self.FILE_MODE)
            os.replace(tmp.name, target)
        except OSError as e:
            logger.error(f"[UPLOAD] Failed to save file locally: {e}")
            Path(tmp.name).unlink(missing_ok=True)
            raise StorageError(f"Failed to save file: {e}")

        logger.info(f"[UPLOAD] Saved '{upload.filename}' as {target}")
        return filename

    def delete(self, filename: str) -> bool:
        path = self.path_for(filename)
        try:
            path.unlink()
        except FileNotFoundError:
            logger.warning(f"File {path} was already missing, nothing to delete")
            return False
        except OSError as e:
            logger.error(f"Failed to delete file {path}: {e}")
            raise StorageError(f"Failed to delete file: {e}")
        logger.info(f"Deleted file {path}")
        return True

    def exists(self, filename: str) -> bool:
        return self.path_for(filename).is_file()

    def url(self, filename: str) -> str:
        return f"{self.base_url}{self.url_path}/{filename}"


class R2Storage(FileStorage):
    """Handles file storage using Cloudflare R2"""

    def __init__(self, settings: Settings, client=None):
        self.bucket = settings.R2_BUCKET_NAME
        self.public_url = settings.R2_PUBLIC_URL.rstrip("/")
        if not self.public_url:
            raise RuntimeError("R2 storage not properly configured - missing: R2_PUBLIC_URL")

        if client is None:
            missing = [
                name
                for name in ("R2_ENDPOINT", "R2_ACCESS_KEY_ID", "R2_SECRET_ACCESS_KEY")
                if not getattr(settings, name)
            ]
            if missing:
                raise RuntimeError(f"R2 storage not properly configured - missing: {', '.join(missing)}")
            logger.info(f"Creating S3 client for R2 bucket '{self.bucket}'")
            client = boto3.client(
                "s3",
                endpoint_url=settings.R2_ENDPOINT,
                aws_access_key_id=settings.R2_ACCESS_KEY_ID,
                aws_secret_access_key=settings.R2_SECRET_ACCESS_KEY,
            )
        self.client = client

    def save(self, upload: UploadFile) -> str:
        filename = generate_filename(upload.filename)
        logger.info(f"[UPLOAD] Uploading '{upload.filename}' to R2 bucket '{self.bucket}' as '{filename}'")
        try:
            upload.file.seek(0)
            self.client.put_object(
                Bucket=self.bucket,
                Key=filename,
                Body=upload.file.read(),
                ContentType=upload.content_type or "application/octet-stream",
            )
        except (BotoCoreError, ClientError) as e:
            logger.error(f"[UPLOAD] Failed to upload to R2: {e}")
            raise StorageError(f"Failed to upload file: {e}")
        return filename

    def delete(self, filename: str) -> bool:
        if not self.exists(filename):
            logger.warning(f"Object '{filename}' was already missing from bucket '{self.bucket}'")
            return False
        try:
            self.client.delete_object(Bucket=self.bucket, Key=filename)
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Failed to delete from R2: {e}")
            raise StorageError(f"Failed to delete file: {e}")
        logger.info(f"Deleted '{filename}' from bucket '{self.bucket}'")
        return True

    def exists(self, filename: str) -> bool:
        try:
            self.client.head_object(Bucket=self.bucket, Key=filename)
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") in ("404", "NoSuchKey", "NotFound"):
                return False
            raise StorageError(f"Failed to look up file: {e}")
        return True

    def url(self, filename: str) -> str:
        return f"{self.public_url}/{filename}"


def create_storage(settings: Settings, client: Optional[object] = None) -> FileStorage:
    if settings.STORAGE_BACKEND == "r2":
        return R2Storage(settings, client=client)
    return LocalStorage(settings.UPLOAD_DIRECTORY, settings.UPLOADS_URL_PATH, settings.BASE_URL)


def discard_file(storage: FileStorage, filename: str) -> None:
    """Remove a file that is no longer referenced; failures are logged, not raised."""
    try:
        storage.delete(filename)
    except StorageError as e:
        logger.error(f"Could not remove unreferenced file {filename}: {e.message}")
