from __future__ import annotations

from fastapi import UploadFile

from taskflow.domain.ports import UploadedFile


async def read_upload(upload: UploadFile | None) -> UploadedFile | None:
    """Buffer a multipart file part; a missing or unnamed part counts as no file."""
    if upload is None or not upload.filename:
        return None
    try:
        content = await upload.read()
    finally:
        await upload.close()
    return UploadedFile(filename=upload.filename, content=content, content_type=upload.content_type)
