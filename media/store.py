"""
media/store.py -- Local filesystem storage for uploaded car images.

Accept-and-store only: bytes go to disk unchanged, no resizing or decoding.
Each stored file gets a stable reference of the form /uploads/<name>, which
is what the Car record keeps and what asgi.py serves as static files.

File names are "<epoch millis>-<sanitized original name>" so two uploads of
"car.jpg" never collide and the original name stays recognisable.

Usage:
    images = ImageStore(Path("uploads"))
    ref = images.store(blob, "swift.jpg")   # "/uploads/1718000000000-swift.jpg"
    images.delete(ref)                      # True, or False if already gone
"""

import logging
import re
import time
from pathlib import Path

logger = logging.getLogger("carrental.media")

URL_PREFIX = "/uploads/"

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def _safe_name(filename: str) -> str:
    """Strip directory components and anything outside [A-Za-z0-9._-]."""
    base = Path(filename or "").name
    cleaned = _UNSAFE_CHARS.sub("_", base).strip("._")
    return cleaned[:100] or "image"


class ImageStore:
    def __init__(self, upload_dir: Path) -> None:
        self.upload_dir = Path(upload_dir)
        self.upload_dir.mkdir(parents=True, exist_ok=True)

    def store(self, blob: bytes, filename: str) -> str:
        """Write blob to disk and return its reference."""
        stamp = int(time.time() * 1000)
        safe = _safe_name(filename)
        name = f"{stamp}-{safe}"
        counter = 1
        # Exclusive create: a same-millisecond upload of the same name, from
        # this process or another worker, gets a counter suffix instead.
        while True:
            try:
                with (self.upload_dir / name).open("xb") as fh:
                    fh.write(blob)
                break
            except FileExistsError:
                name = f"{stamp}-{counter}-{safe}"
                counter += 1
        logger.info("Stored image %s (%d bytes)", name, len(blob))
        return URL_PREFIX + name

    def path_for(self, ref: str) -> Path:
        """Resolve a reference to its file path inside upload_dir.

        Only the final path component of ref is used, so a crafted reference
        such as "/uploads/../../etc/passwd" cannot escape the upload dir.
        """
        return self.upload_dir / Path(ref).name

    def delete(self, ref: str) -> bool:
        """Remove the file behind ref. Returns False if it did not exist."""
        if not ref:
            return False
        path = self.path_for(ref)
        try:
            path.unlink()
        except FileNotFoundError:
            logger.warning("Image %s already removed", ref)
            return False
        logger.info("Deleted image %s", ref)
        return True
