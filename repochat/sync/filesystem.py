"""
Filesystem Capability

The directory operations the sync engine performs, behind an interface so
tests can inject failures at any step of the backup/swap protocol.
"""

import os
import shutil
from abc import ABC, abstractmethod
from pathlib import Path


class FileSystem(ABC):
    """Directory and file operations used by the sync engine."""

    @abstractmethod
    def exists(self, path: Path) -> bool: ...

    @abstractmethod
    def makedirs(self, path: Path) -> None: ...

    @abstractmethod
    def write_bytes(self, path: Path, data: bytes) -> None: ...

    @abstractmethod
    def rename(self, src: Path, dst: Path) -> None:
        """Atomic rename within one volume. Fails if dst exists."""

    @abstractmethod
    def remove_tree(self, path: Path) -> None: ...

    @abstractmethod
    def list_dir(self, path: Path) -> list[str]: ...


class LocalFileSystem(FileSystem):
    """FileSystem backed by os and shutil."""

    def exists(self, path: Path) -> bool:
        return os.path.lexists(path)

    def makedirs(self, path: Path) -> None:
        os.makedirs(path, exist_ok=True)

    def write_bytes(self, path: Path, data: bytes) -> None:
        Path(path).parent.mkdir(parents=True, exist_ok=True)
        with open(path, "wb") as f:
            f.write(data)

    def rename(self, src: Path, dst: Path) -> None:
        if os.path.lexists(dst):
            raise FileExistsError(f"Rename target already exists: {dst}")
        os.rename(src, dst)

    def remove_tree(self, path: Path) -> None:
        if os.path.isdir(path) and not os.path.islink(path):
            shutil.rmtree(path)
        else:
            os.unlink(path)

    def list_dir(self, path: Path) -> list[str]:
        return os.listdir(path)
