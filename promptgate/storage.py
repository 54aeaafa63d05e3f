"""Durable file storage for presets and the model catalog."""

import logging
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


class FileStore(ABC):
    """Abstract text file store addressed by relative path."""

    @abstractmethod
    def read(self, path: str) -> str:
        """Read a file.

        Raises:
            FileNotFoundError: If the file does not exist
        """
        pass

    @abstractmethod
    def write(self, path: str, content: str) -> None:
        """Replace a file's content atomically."""
        pass

    @abstractmethod
    def exists(self, path: str) -> bool:
        pass

    @abstractmethod
    def delete(self, path: str) -> bool:
        pass

    @abstractmethod
    def list(self, directory: str = "", suffix: Optional[str] = None) -> list[str]:
        """List file names (not paths) in a directory, sorted."""
        pass


class LocalFileStore(FileStore):
    """File store rooted at a local directory.

    Writes go to a temporary file in the target directory which is then
    renamed over the destination, so readers never see a partial file.
    """

    def __init__(self, root: str | Path = ".") -> None:
        self.root = Path(root)

    def _path(self, path: str) -> Path:
        return self.root / path

    def read(self, path: str) -> str:
        return self._path(path).read_text(encoding="utf-8")

    def write(self, path: str, content: str) -> None:
        target = self._path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=target.parent, prefix=f".{target.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(content)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, target)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise
        logger.debug("Wrote %s", target)

    def exists(self, path: str) -> bool:
        return self._path(path).is_file()

    def delete(self, path: str) -> bool:
        target = self._path(path)
        if not target.is_file():
            return False
        target.unlink()
        return True

    def list(self, directory: str = "", suffix: Optional[str] = None) -> list[str]:
        base = self._path(directory) if directory else self.root
        if not base.is_dir():
            return []
        return sorted(
            p.name for p in base.iterdir()
            if p.is_file() and not p.name.startswith(".") and (suffix is None or p.name.endswith(suffix))
        )


class MemoryFileStore(FileStore):
    """Dictionary backed store, for tests and ephemeral gateways."""

    def __init__(self, files: Optional[dict[str, str]] = None) -> None:
        self.files: dict[str, str] = dict(files or {})
        self.writes = 0

    def read(self, path: str) -> str:
        if path not in self.files:
            raise FileNotFoundError(path)
        return self.files[path]

    def write(self, path: str, content: str) -> None:
        self.files[path] = content
        self.writes += 1

    def exists(self, path: str) -> bool:
        return path in self.files

    def delete(self, path: str) -> bool:
        return self.files.pop(path, None) is not None

    def list(self, directory: str = "", suffix: Optional[str] = None) -> list[str]:
        prefix = f"{directory.rstrip('/')}/" if directory else ""
        names = []
        for path in self.files:
            if not path.startswith(prefix):
                continue
            name = path[len(prefix):]
            if "/" in name or (suffix is not None and not name.endswith(suffix)):
                continue
            names.append(name)
        return sorted(names)
