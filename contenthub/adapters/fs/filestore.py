import os
from pathlib import Path
from uuid import uuid4

# Stored extension is derived from the checked content type, never the client filename
IMAGE_EXTENSIONS = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
    "image/gif": "gif",
}
_MEDIA_TYPES = {ext: mime for mime, ext in IMAGE_EXTENSIONS.items()}


def mime_to_extension(mime_type: str) -> str:
    return IMAGE_EXTENSIONS.get(mime_type.lower(), "bin")


class FileSystemStore:
    def __init__(self, base_path: str):
        self.base_path = Path(base_path).resolve()
        if not self.base_path.exists():
            os.makedirs(self.base_path, exist_ok=True)

    def _safe_path(self, path: str) -> Path:
        # Prevent traversal
        target = (self.base_path / path).resolve()
        if not target.is_relative_to(self.base_path):
            raise ValueError(f"Path traversal attempt detected: {path}")
        return target

    def save(self, name: str, data: bytes) -> str:
        """Save bytes and return the name relative to the store root."""
        target = self._safe_path(name)
        target.parent.mkdir(parents=True, exist_ok=True)
        with open(target, "wb") as f:
            f.write(data)
        return str(target.relative_to(self.base_path))

    def save_image(self, data: bytes, content_type: str) -> str:
        """Store an uploaded image under a fresh unique name."""
        return self.save(f"{uuid4().hex}.{mime_to_extension(content_type)}", data)

    def get(self, path: str) -> bytes:
        """Retrieve bytes by path. Raises FileNotFoundError."""
        target = self._safe_path(path)
        if not target.is_file():
            raise FileNotFoundError(f"File not found: {path}")
        with open(target, "rb") as f:
            return f.read()

    def media_type(self, path: str) -> str:
        """Only known image extensions are served as images."""
        ext = Path(path).suffix.lower().lstrip(".")
        return _MEDIA_TYPES.get(ext, "application/octet-stream")
