"""Local artifact store for generated and uploaded images."""
import logging
import mimetypes
import uuid
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

_EXTENSIONS: dict[str, str] = {
    "image/png": ".png",
    "image/jpeg": ".jpg",
    "image/webp": ".webp",
    "image/gif": ".gif",
}


class ArtifactStore:
    """Writes image bytes under a directory served by the /uploads static mount.

    Every call to ``save`` writes a fresh uuid-named file, so repeated calls
    never overwrite each other.
    """

    def __init__(self, root_dir: Path | str, url_prefix: str = "/uploads") -> None:
        self.root_dir = Path(root_dir)
        self.url_prefix = url_prefix.rstrip("/")

    def save(self, data: bytes, mime_type: str = "image/png") -> str:
        """Persist image bytes and return the URL path they are served from.

        Args:
            data: Raw image bytes.
            mime_type: Media type, used to pick the file extension.

        Returns:
            URL path such as ``/uploads/<uuid>.png``.
        """
        self.root_dir.mkdir(parents=True, exist_ok=True)
        filename = f"{uuid.uuid4()}{_EXTENSIONS.get(mime_type, '.png')}"
        (self.root_dir / filename).write_bytes(data)
        logger.debug("Stored artifact %s (%d bytes)", filename, len(data))
        return f"{self.url_prefix}/{filename}"

    def resolve(self, url: str) -> Optional[Path]:
        """Map a URL returned by ``save`` back to its file path.

        Returns None for URLs outside this store (remote URLs, other mounts)
        or names that would escape the root directory.
        """
        prefix = f"{self.url_prefix}/"
        if not url.startswith(prefix):
            return None
        name = url[len(prefix):]
        if not name or "/" in name or "\\" in name or name in (".", ".."):
            return None
        return self.root_dir / name

    def delete(self, url: str) -> None:
        """Remove a stored artifact. Unknown or foreign URLs are ignored."""
        path = self.resolve(url)
        if path is None:
            return
        path.unlink(missing_ok=True)
        logger.info("Removed artifact %s", path.name)

    @staticmethod
    def guess_mime_type(path: Path) -> str:
        mime_type, _ = mimetypes.guess_type(path.name)
        return mime_type or "image/png"
