from pathlib import Path
import logging
import os
import shutil
import uuid
from typing import List, Optional

from fastapi import UploadFile

from app.config import get_settings

logger = logging.getLogger(__name__)

BASE_DIR = Path(__file__).resolve().parents[2]
MEDIA_ROOT = Path(get_settings().MEDIA_ROOT or BASE_DIR / "media")
PRODUCT_SUBDIR = "products"


def _ensure_dir(path: Path) -> None:
    path.mkdir(parents=True, exist_ok=True)


def save_upload_file(upload_file: UploadFile, subdir: str = PRODUCT_SUBDIR) -> str:
    """Save a single UploadFile under media/subdir and return the stored file name.

    The original extension is kept; the stem is replaced by a random hex id so
    uploads never collide.
    """
    if not upload_file or not upload_file.filename:
        raise ValueError("No file provided")
    ext = os.path.splitext(upload_file.filename)[1].lower()
    filename = f"{uuid.uuid4().hex}{ext}"
    dst_dir = MEDIA_ROOT / subdir
    _ensure_dir(dst_dir)
    with (dst_dir / filename).open("wb") as buffer:
        shutil.copyfileobj(upload_file.file, buffer)
    return filename


def save_multiple_upload_files(files: List[UploadFile], subdir: str = PRODUCT_SUBDIR) -> List[str]:
    """Save uploads in order. On failure, files already written are removed before re-raising."""
    names: List[str] = []
    try:
        for f in files or []:
            if f and f.filename:
                names.append(save_upload_file(f, subdir=subdir))
    except OSError:
        delete_media_files(names, subdir=subdir)
        raise
    return names


def delete_media_file(filename: Optional[str], subdir: str = PRODUCT_SUBDIR) -> bool:
    """Delete a stored file by name. Only operates inside MEDIA_ROOT/subdir."""
    if not filename or "/" in filename or "\\" in filename:
        return False
    target_path = MEDIA_ROOT / subdir / filename
    try:
        if target_path.is_file():
            target_path.unlink()
            return True
    except OSError:
        logger.warning("Could not delete media file %s", target_path, exc_info=True)
    return False


def delete_media_files(filenames: Optional[List[str]], subdir: str = PRODUCT_SUBDIR) -> int:
    """Delete multiple media files; returns count of successfully removed files."""
    removed = 0
    for name in filenames or []:
        if delete_media_file(name, subdir=subdir):
            removed += 1
    return removed
