import logging
import os
import re
import time
from dataclasses import dataclass
from typing import List, Optional
from uuid import uuid4

from fastapi import UploadFile
from sqlalchemy.orm import Session

from storefront.config import Settings
from storefront.errors import UploadRejected, UploadRequired
from storefront.repositories.product_repo import ProductRepository

log = logging.getLogger("storefront.uploads")

CHUNK_SIZE = 64 * 1024

# extension -> MIME subtype the client may declare for it
IMAGE_SUBTYPES = {
    "jpeg": "jpeg",
    "jpg": "jpeg",
    "png": "png",
    "gif": "gif",
    "webp": "webp",
}

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


@dataclass
class StagedImage:
    original_name: str
    content_type: str
    data: bytes


def safe_filename(name: str) -> str:
    base = os.path.basename(name.replace("\\", "/"))
    cleaned = _UNSAFE_CHARS.sub("_", base).strip("._")
    return cleaned or "image"


class ImageStorage:
    """Checks product image uploads and writes accepted ones to the upload directory."""

    def __init__(self, settings: Settings):
        self.upload_dir = settings.UPLOAD_DIR
        self.url_prefix = settings.UPLOAD_URL_PREFIX.rstrip("/")
        self.max_bytes = settings.MAX_UPLOAD_BYTES
        self.allowed = {ext.lower().lstrip(".") for ext in settings.ALLOWED_IMAGE_EXTENSIONS}
        self.grace_seconds = settings.ORPHAN_GRACE_SECONDS

    def single(self, uploads: Optional[List[UploadFile]]) -> Optional[UploadFile]:
        """The one image part of a form; a product takes at most one file."""
        if not uploads:
            return None
        if len(uploads) > 1:
            raise UploadRejected("Only one image file may be uploaded")
        return uploads[0]

    def stage(self, upload: Optional[UploadFile], required: bool) -> Optional[StagedImage]:
        """
        Validate an uploaded image and read it into memory.

        Returns None when no file was sent and one is not required (an update
        keeps the existing image). Nothing touches the disk here.
        """
        if upload is None or not upload.filename:
            if required:
                raise UploadRequired()
            return None

        ext = os.path.splitext(upload.filename)[1].lower().lstrip(".")
        if ext not in self.allowed or ext not in IMAGE_SUBTYPES:
            raise UploadRejected(f"Unsupported image type '.{ext}'" if ext else "Image file has no extension")

        content_type = (upload.content_type or "").lower()
        if content_type and content_type != "application/octet-stream":
            if content_type not in (f"image/{IMAGE_SUBTYPES[ext]}", f"image/{ext}"):
                raise UploadRejected(f"Unsupported content type '{content_type}'")

        data = self._read_limited(upload)
        if not data:
            raise UploadRejected("Image file is empty")
        return StagedImage(original_name=upload.filename, content_type=content_type, data=data)

    def _read_limited(self, upload: UploadFile) -> bytes:
        chunks = []
        size = 0
        while True:
            chunk = upload.file.read(CHUNK_SIZE)
            if not chunk:
                break
            size += len(chunk)
            if size > self.max_bytes:
                raise UploadRejected(f"Image exceeds {self.max_bytes} bytes")
            chunks.append(chunk)
        return b"".join(chunks)

    def store(self, staged: StagedImage) -> str:
        """Write the image under a collision-resistant name and return its public path."""
        os.makedirs(self.upload_dir, exist_ok=True)
        filename = f"{int(time.time() * 1000)}-{uuid4().hex[:12]}-{safe_filename(staged.original_name)}"
        path = os.path.join(self.upload_dir, filename)
        # "xb" fails instead of overwriting should a name ever repeat
        with open(path, "xb") as f:
            f.write(staged.data)
        log.info("Stored upload %s (%d bytes)", filename, len(staged.data))
        return f"{self.url_prefix}/{filename}"

    def filename_for(self, url: Optional[str]) -> Optional[str]:
        if not url or not url.startswith(self.url_prefix + "/"):
            return None
        return url[len(self.url_prefix) + 1:]

    def sweep_orphans(self, db: Session, now: Optional[float] = None) -> list:
        """
        Delete uploaded files that no product references any more.

        Files younger than the grace period are kept so an upload whose
        product row is still being written is never removed.
        """
        if not os.path.isdir(self.upload_dir):
            return []
        now = now if now is not None else time.time()
        referenced = {
            self.filename_for(url) for url in ProductRepository(db).image_urls()
        }
        removed = []
        for entry in os.scandir(self.upload_dir):
            if not entry.is_file() or entry.name in referenced:
                continue
            if now - entry.stat().st_mtime < self.grace_seconds:
                continue
            try:
                os.remove(entry.path)
                removed.append(entry.name)
            except FileNotFoundError:
                # another sweeper got there first
                continue
        if removed:
            log.info("Removed %d orphaned upload(s)", len(removed))
        return removed
