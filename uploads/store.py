"""
uploads/store.py -- File storage for job application documents and avatars.

Layout under the configured upload root:
    <root>/documents/<user id>/<original file name>
    <root>/avatars/user_<id>.<ext>

Documents keep the client's file name (reduced to its last path component)
because job application records reference them by that name. Each user has
their own folder; uploading a name the same user already stored replaces it.

Avatars are stored as uploaded; no resizing or re-encoding. The image type
is decided from the file's leading bytes, not the client's Content-Type.

Usage:
    uploads = UploadStore(Path("public"))
    names = uploads.save_documents(7, [("cv.pdf", b"...")])
    path = uploads.document_path(7, "cv.pdf")
    avatar = uploads.save_avatar(7, png_bytes)    # "user_7.png"
    uploads.delete_avatar(avatar)
"""

from __future__ import annotations

import logging
import shutil
from collections.abc import Iterable
from pathlib import Path, PurePosixPath, PureWindowsPath

logger = logging.getLogger("jobtrack.uploads")

_IMAGE_SIGNATURES: tuple[tuple[bytes, str], ...] = (
    (b"\x89PNG\r\n\x1a\n", ".png"),
    (b"\xff\xd8\xff", ".jpg"),
    (b"GIF87a", ".gif"),
    (b"GIF89a", ".gif"),
)


class UnsafeFileNameError(ValueError):
    """Raised for file names that are empty or would escape the upload directory."""


class UnsupportedImageError(ValueError):
    """Raised when avatar bytes are not a PNG, JPEG, GIF, or WebP image."""


def safe_file_name(name: str | None) -> str:
    """Reduce a client-supplied file name to its final path component.

    Handles both "/" and "\\" separators. Raises UnsafeFileNameError when
    nothing usable is left (empty, ".", "..").
    """
    if not name:
        raise UnsafeFileNameError("File name is required.")
    base = PureWindowsPath(PurePosixPath(name).name).name.strip()
    if base in ("", ".", ".."):
        raise UnsafeFileNameError(f"Unusable file name: {name!r}")
    return base


def sniff_image_extension(data: bytes) -> str:
    """Return the file extension for the image in data, or raise UnsupportedImageError."""
    for signature, extension in _IMAGE_SIGNATURES:
        if data.startswith(signature):
            return extension
    if len(data) >= 12 and data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return ".webp"
    raise UnsupportedImageError("Avatar must be a PNG, JPEG, GIF, or WebP image.")


class UploadStore:
    def __init__(self, root: Path) -> None:
        self.root = Path(root)
        self.documents_dir = self.root / "documents"
        self.avatars_dir = self.root / "avatars"
        self.documents_dir.mkdir(parents=True, exist_ok=True)
        self.avatars_dir.mkdir(parents=True, exist_ok=True)

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------

    def _user_documents_dir(self, user_id: int) -> Path:
        return self.documents_dir / str(int(user_id))

    def save_documents(self, user_id: int, files: Iterable[tuple[str | None, bytes]]) -> list[str]:
        """Write (file name, content) pairs into user_id's folder; return the stored names in order.

        Every name is checked before anything is written, so one bad name
        rejects the whole batch. Names only collide with the same user's
        earlier uploads.
        """
        batch = [(safe_file_name(name), content) for name, content in files]
        folder = self._user_documents_dir(user_id)
        folder.mkdir(parents=True, exist_ok=True)
        for name, content in batch:
            (folder / name).write_bytes(content)
            logger.info("Stored document %s for user %d (%d bytes)", name, user_id, len(content))
        return [name for name, _ in batch]

    def document_path(self, user_id: int, name: str) -> Path | None:
        """Return the path of one of user_id's documents, or None if it does not exist.

        Raises UnsafeFileNameError if name carries path components.
        """
        if safe_file_name(name) != name:
            raise UnsafeFileNameError(f"File name must not contain a path: {name!r}")
        path = self._user_documents_dir(user_id) / name
        return path if path.is_file() else None

    def delete_documents(self, user_id: int) -> int:
        """Remove every document user_id uploaded. Returns the number of files removed."""
        folder = self._user_documents_dir(user_id)
        if not folder.is_dir():
            return 0
        count = sum(1 for p in folder.iterdir() if p.is_file())
        shutil.rmtree(folder)
        logger.info("Removed %d document(s) for user %d", count, user_id)
        return count

    # ------------------------------------------------------------------
    # Avatars
    # ------------------------------------------------------------------

    def save_avatar(self, user_id: int, data: bytes) -> str:
        """Store data as the avatar for user_id and return the file name.

        Any earlier avatar for the same user is removed first, including one
        with a different extension.
        """
        extension = sniff_image_extension(data)
        for previous in self.avatars_dir.glob(f"user_{user_id}.*"):
            previous.unlink(missing_ok=True)
        name = f"user_{user_id}{extension}"
        (self.avatars_dir / name).write_bytes(data)
        logger.info("Stored avatar %s (%d bytes)", name, len(data))
        return name

    def avatar_path(self, name: str) -> Path | None:
        try:
            if safe_file_name(name) != name:
                return None
        except UnsafeFileNameError:
            return None
        path = self.avatars_dir / name
        return path if path.is_file() else None

    def delete_avatar(self, name: str) -> bool:
        """Remove a stored avatar. Returns True if a file was deleted."""
        path = self.avatar_path(name)
        if path is None:
            return False
        path.unlink(missing_ok=True)
        logger.info("Removed avatar %s", name)
        return True
