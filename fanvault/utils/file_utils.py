# fanvault/utils/file_utils.py
import os
import time
from typing import Optional

import aiofiles
from fastapi import UploadFile, HTTPException
from starlette import status

from fanvault.config.settings import settings

BUCKETS = ("avatars", "posts", "messages", "verification-docs")

# Поддерживаемые MIME types
IMAGE_MIME_TYPES = {"image/jpeg", "image/png", "image/gif", "image/webp"}
VIDEO_MIME_TYPES = {"video/mp4", "video/webm", "video/quicktime"}
DOCUMENT_MIME_TYPES = {"application/pdf"}

ALLOWED_MIME_TYPES = {
    "avatars": IMAGE_MIME_TYPES,
    "posts": IMAGE_MIME_TYPES | VIDEO_MIME_TYPES,
    "messages": IMAGE_MIME_TYPES | VIDEO_MIME_TYPES,
    "verification-docs": IMAGE_MIME_TYPES | DOCUMENT_MIME_TYPES,
}

# Расширения файлов как fallback
MIME_TO_EXTENSION = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/gif": "gif",
    "image/webp": "webp",
    "video/mp4": "mp4",
    "video/webm": "webm",
    "video/quicktime": "mov",
    "application/pdf": "pdf",
}


def message_type_from_mime(mime_type: Optional[str]) -> str:
    """Тип сообщения по MIME типу вложения"""
    if not mime_type:
        return "file"
    if mime_type.startswith("image/"):
        return "image"
    if mime_type.startswith("video/"):
        return "video"
    return "file"


def validate_upload(bucket: str, content_type: Optional[str], size: int) -> None:
    """Проверка бакета, MIME типа и размера файла"""
    if bucket not in BUCKETS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Неизвестное хранилище: {bucket}"
        )

    if content_type not in ALLOWED_MIME_TYPES[bucket]:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Неподдерживаемый формат файла: {content_type}"
        )

    if size > settings.MAX_UPLOAD_SIZE:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Файл слишком большой. Максимальный размер: {settings.MAX_UPLOAD_SIZE // 1024 // 1024}MB"
        )


def generate_file_path(bucket: str, user_id: int, filename: str, content_type: str,
                       subfolder: str = "uploads") -> str:
    """Генерация относительного пути: bucket/user_id/subfolder/timestamp.ext"""
    ext = os.path.splitext(filename or "")[1].lstrip(".").lower() or MIME_TO_EXTENSION.get(content_type, "bin")
    timestamp = int(time.time() * 1000)
    return f"{bucket}/{user_id}/{subfolder}/{timestamp}.{ext}"


def public_url(relative_path: str) -> str:
    return f"{settings.MEDIA_URL_PREFIX}/{relative_path}"


async def save_uploaded_file(
        file: UploadFile,
        bucket: str,
        user_id: int,
        subfolder: str = "uploads"
) -> str:
    """Сохранение загруженного файла, возвращает публичный URL"""
    contents = await file.read()
    validate_upload(bucket, file.content_type, len(contents))

    relative_path = generate_file_path(bucket, user_id, file.filename, file.content_type, subfolder)
    full_path = os.path.join(str(settings.MEDIA_ROOT), relative_path)
    os.makedirs(os.path.dirname(full_path), exist_ok=True)

    async with aiofiles.open(full_path, 'wb') as f:
        await f.write(contents)

    return public_url(relative_path)
