"""Local-disk file store for uploaded images and task documents."""

from __future__ import annotations

import asyncio
from pathlib import Path, PurePosixPath, PureWindowsPath
from uuid import uuid4

import structlog

from taskflow.domain.ports import UploadedFile

logger = structlog.get_logger()

UPLOAD_FOLDER = PurePosixPath("assets", "images")


class LocalFileStore:
    """Writes uploads under ``root`` and hands back POSIX paths relative to it."""

    def __init__(self, root: str | Path, folder: PurePosixPath = UPLOAD_FOLDER) -> None:
        self.root = Path(root).resolve()
        self.folder = folder

    async def upload(self, file: UploadedFile, delete_existing_at: str | None = None) -> str:
        if delete_existing_at:
            await self.remove(delete_existing_at)

        # Browsers may send a full client-side path; keep the last segment only.
        filename = PureWindowsPath(file.filename).name or "upload"
        relative = self.folder / f"{uuid4()}_{filename}"
        target = self._resolve(str(relative))
        await asyncio.to_thread(self._write, target, file.content)

        await logger.ainfo("file_uploaded", path=str(relative), size=file.size)
        return str(relative)

    async def remove(self, path: str | None) -> None:
        if not path or not path.strip():
            return
        target = self._resolve(path)
        removed = await asyncio.to_thread(self._unlink, target)
        if removed:
            await logger.ainfo("file_removed", path=path)

    def _resolve(self, path: str) -> Path:
        relative = path.strip().lstrip("/").replace("\\", "/")
        target = (self.root / relative).resolve()
        if not target.is_relative_to(self.root):
            raise ValueError(f"Path escapes the upload root: {path}")
        return target

    @staticmethod
    def _write(target: Path, content: bytes) -> None:
        target.parent.mkdir(parents=True, exist_ok=True)
        try:
            target.write_bytes(content)
        except BaseException:
            target.unlink(missing_ok=True)
            raise

    @staticmethod
    def _unlink(target: Path) -> bool:
        if not target.is_file():
            return False
        target.unlink()
        return True
