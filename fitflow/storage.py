# fitflow/storage.py
import os
import time
from pathlib import Path
from typing import Any, Dict

from fitflow.db import DATA_DIR

UPLOAD_DIR = DATA_DIR / "profile-images"
UPLOAD_URL_PREFIX = "/profile-images"
MAX_UPLOAD_BYTES = int(os.getenv("MAX_UPLOAD_BYTES", str(5 * 1024 * 1024)))

# The stored extension decides the served content type, so it comes from here
# and never from the client's filename.
IMAGE_EXTENSIONS = {
    "image/png": "png",
    "image/jpeg": "jpg",
    "image/gif": "gif",
    "image/webp": "webp",
}


def user_image_dir(uid: str) -> Path:
    return UPLOAD_DIR / uid


def upload_profile_image(uid: str, filename: str, content: bytes, content_type: str) -> Dict[str, Any]:
    content_type = (content_type or "").split(";")[0].strip().lower()
    ext = IMAGE_EXTENSIONS.get(content_type)
    if ext is None:
        raise ValueError("only PNG, JPEG, GIF or WebP images are allowed")
    if not content:
        raise ValueError("file is empty")
    if len(content) > MAX_UPLOAD_BYTES:
        raise ValueError(f"file exceeds {MAX_UPLOAD_BYTES} bytes")

    name = f"profile-{int(time.time() * 1000)}.{ext}"

    target_dir = user_image_dir(uid)
    target_dir.mkdir(parents=True, exist_ok=True)
    target = target_dir / name
    target.write_bytes(content)

    return {
        "url": f"{UPLOAD_URL_PREFIX}/{uid}/{name}",
        "path": f"profile-images/{uid}/{name}",
        "name": name,
        "original_name": filename or name,
        "size": len(content),
        "content_type": content_type,
    }
