"""
Object storage for uploaded files (knowledge-base documents, menu images).

Only a local filesystem backend exists; files are served under
``settings.storage_public_url``.
"""

import secrets
from datetime import datetime
from pathlib import Path, PurePosixPath

from starlette.concurrency import run_in_threadpool
import structlog

from app.config import settings
from app.exceptions import ExternalServiceError, InvalidPayloadError

logger = structlog.get_logger()


class LocalStorage:
    """Stores objects below a root directory keyed by relative POSIX paths"""

    def __init__(self, root: str, public_url: str):
        self.root = Path(root)
        self.public_url = public_url.rstrip("/")

    def build_key(self, prefix: str, filename: str) -> str:
        """Unique key that keeps the original extension"""
        suffix = PurePosixPath(filename or "").suffix.lower()
        stamp = datetime.now().strftime("%Y%m%d%H%M%S")
        return f"{prefix}/{stamp}-{secrets.token_hex(4)}{suffix}"

    def _resolve(self, key: str) -> Path:
        path = (self.root / key).resolve()
        if self.root.resolve() not in path.parents:
            raise InvalidPayloadError(f"Invalid storage key: {key}")
        return path

    def _write(self, key: str, data: bytes) -> None:
        path = self._resolve(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)

    async def upload(self, key: str, data: bytes) -> str:
        try:
            await run_in_threadpool(self._write, key, data)
        except OSError as e:
            logger.error("Storage upload failed", key=key, error=str(e))
            raise ExternalServiceError("storage", f"upload failed for {key}") from e

        logger.info("Stored object", key=key, size=len(data))
        return key

    async def download(self, key: str) -> bytes:
        try:
            return await run_in_threadpool(self._resolve(key).read_bytes)
        except OSError as e:
            logger.error("Storage download failed", key=key, error=str(e))
            raise ExternalServiceError("storage", f"download failed for {key}") from e

    async def remove(self, key: str) -> None:
        """Delete an object; a missing object is not an error"""
        try:
            await run_in_threadpool(self._resolve(key).unlink, True)
        except OSError as e:
            logger.error("Storage remove failed", key=key, error=str(e))
            raise ExternalServiceError("storage", f"remove failed for {key}") from e

    def public_url_for(self, key: str) -> str:
        return f"{self.public_url}/{key}"


def get_storage() -> LocalStorage:
    """FastAPI dependency returning the configured storage backend"""
    if settings.storage_backend != "local":
        raise ExternalServiceError("storage", f"unsupported backend {settings.storage_backend}")
    return LocalStorage(settings.storage_path, settings.storage_public_url)
