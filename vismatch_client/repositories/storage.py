"""Unified file access using fsspec for local paths and remote URLs."""

from pathlib import Path, PurePosixPath

import fsspec


class StorageBackend:
    """Read-only filesystem abstraction for the files a user hands in.

    Uses fsspec internally.  Filesystem instances are lazily created and
    cached per protocol (``file`` for local paths, the URL scheme for
    anything like ``gs://`` or ``memory://``).
    """

    def __init__(self) -> None:
        self._filesystems: dict[str, fsspec.AbstractFileSystem] = {}

    def _get_fs(self, path: str) -> tuple[fsspec.AbstractFileSystem, str]:
        """Resolve the fsspec filesystem and normalised path for *path*.

        ``scheme://...`` URLs use the scheme as the protocol.  Everything
        else is treated as a local file and resolved to an absolute path.
        """
        if "://" in path:
            protocol = path.split("://", 1)[0]
            norm_path = path
        else:
            protocol = "file"
            norm_path = str(Path(path).expanduser().resolve())

        if protocol not in self._filesystems:
            self._filesystems[protocol] = fsspec.filesystem(protocol)

        return self._filesystems[protocol], norm_path

    def read_bytes(self, path: str) -> bytes:
        """Read the entire contents of *path* as bytes."""
        fs, norm_path = self._get_fs(path)
        return fs.cat_file(norm_path)

    @staticmethod
    def basename(path: str) -> str:
        """Return the file name component of a local path or URL."""
        if "://" in path:
            return PurePosixPath(path.split("://", 1)[1]).name
        return Path(path).name
