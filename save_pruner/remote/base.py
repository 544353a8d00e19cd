"""Abstract base class for remote storage backends."""

from __future__ import annotations

from abc import ABC, abstractmethod

from save_pruner.models.backup_file import RemoteEntry


class RemoteError(Exception):
    """A remote listing or deletion failed."""


class RemoteStorage(ABC):
    """Minimal listing / deletion interface over an rclone remote."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Backend identifier (e.g. 'cli', 'rc')."""
        ...

    @abstractmethod
    def list(self, path: str) -> list[RemoteEntry]:
        """List the direct children of *path* (relative to the remote root)."""
        ...

    @abstractmethod
    def delete(self, path: str) -> None:
        """Delete a single file at *path* (relative to the remote root)."""
        ...

    def close(self) -> None:
        """Release connections held by the backend. Optional."""
        return None

    def __enter__(self) -> RemoteStorage:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def join_path(*parts: str) -> str:
    """Join remote path segments with '/', ignoring empty ones."""
    return "/".join(p.strip("/") for p in parts if p and p.strip("/"))
