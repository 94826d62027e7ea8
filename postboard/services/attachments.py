"""
Attachment manager - the single optional file behind a post.

Files are written under their original name directly in the upload root.
Two uploads with the same name overwrite each other; the last write wins.
Deletes are idempotent: a file that is already gone is not an error.

Any OSError from the filesystem surfaces as StorageIO. Names with no
usable file name part, or with a NUL byte, are ValidationFailed.
"""

from __future__ import annotations

import logging
from pathlib import Path, PurePosixPath, PureWindowsPath

from postboard.core.errors import EmptyAttachment, StorageIO, ValidationFailed
from postboard.core.models import AttachmentDescriptor, FilePayload
from postboard.storage.base import FileSystem
from postboard.storage.local import LocalFileSystem

logger = logging.getLogger(__name__)


class AttachmentManager:
    """Stores, replaces and removes post attachments under one root directory."""

    def __init__(self, root: Path | str, files: FileSystem | None = None):
        self.root = Path(root)
        self.files = files or LocalFileSystem()

    def store(self, payload: FilePayload) -> AttachmentDescriptor:
        """
        Write a new file and describe it.

        Raises:
            EmptyAttachment: payload has no bytes
            ValidationFailed: the name has no usable file name part
            StorageIO: the write failed
        """
        if payload.is_empty:
            raise EmptyAttachment(f"Failed to store empty file {payload.original_name!r}")

        name = _safe_name(payload.original_name)
        path = self.root / name

        try:
            if not self.files.exists(self.root):
                self.files.create_directories(self.root)
            self.files.write(payload.data, path)
        except OSError as e:
            raise StorageIO(f"Could not store {name}: {e}", path=str(path)) from e

        logger.info("Stored attachment %s (%d bytes)", path, len(payload.data))
        return AttachmentDescriptor(
            name=name,
            path=str(path),
            content_type=payload.content_type,
        )

    def replace(
        self,
        existing: AttachmentDescriptor | None,
        payload: FilePayload,
    ) -> AttachmentDescriptor:
        """Remove the existing file (if any), then store the new one."""
        # Check before deleting so an empty upload can't strand the post
        if payload.is_empty:
            raise EmptyAttachment(f"Failed to store empty file {payload.original_name!r}")
        self.remove(existing)
        return self.store(payload)

    def remove(self, descriptor: AttachmentDescriptor | None) -> None:
        """Delete the described file. No-op if there's no descriptor or no file."""
        if descriptor is None:
            return
        try:
            deleted = self.files.delete_if_exists(Path(descriptor.path))
        except OSError as e:
            raise StorageIO(f"Could not delete {descriptor.path}: {e}", path=descriptor.path) from e
        if deleted:
            logger.info("Deleted attachment %s", descriptor.path)
        else:
            logger.debug("Attachment %s already gone", descriptor.path)


def _safe_name(original_name: str) -> str:
    """Reduce an uploaded name to its last path component."""
    name = PurePosixPath(PureWindowsPath(original_name or "").name).name
    if name in ("", ".", "..") or "\x00" in name:
        raise ValidationFailed(f"Invalid attachment file name: {original_name!r}")
    return name
