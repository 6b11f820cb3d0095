"""
Pytest fixtures for RepoChat tests.
"""

import os
import sys
import tempfile
from pathlib import Path
from typing import Callable, Generator, Optional, Union

import pytest

# Add project root to path for repochat imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# Keep tests away from the user's ~/.repochat
os.environ["REPOCHAT_DATA_PATH"] = tempfile.mkdtemp(prefix="repochat_test_data_")

from repochat.exceptions import DownloadError, LLMConnectionError, RemoteUnavailableError  # noqa: E402
from repochat.llm import LLMConfig, LLMProvider, LLMResponse  # noqa: E402
from repochat.sync.filesystem import LocalFileSystem  # noqa: E402
from repochat.sync.remote import (  # noqa: E402
    RemoteDirectory,
    RemoteEntry,
    RemoteFile,
    RemoteRepository,
)

# Nested dict of name -> bytes (file) or dict (directory)
Tree = dict


class FakeRemote(RemoteRepository):
    """In-memory remote repository."""

    def __init__(self, tree: Optional[Tree] = None):
        self.tree: Tree = tree or {}
        self.available = True
        self.fail_paths: set[str] = set()
        self.calls: list[str] = []
        self.refs: set[Optional[str]] = set()

    @property
    def description(self) -> str:
        return "fake/remote"

    def get_metadata(self) -> dict:
        self.calls.append("metadata")
        if not self.available:
            raise RemoteUnavailableError("GitHub connection failed: 401 Bad credentials")
        return {"full_name": "fake/remote"}

    def _node(self, path: str) -> Union[bytes, dict]:
        node: Union[bytes, dict] = self.tree
        for part in [p for p in path.split("/") if p]:
            if not isinstance(node, dict) or part not in node:
                raise DownloadError(f"Failed to fetch {path}: 404 Not Found")
            node = node[part]
        return node

    def get_contents(self, path: str, ref: Optional[str] = None) -> Union[RemoteFile, list[RemoteEntry]]:
        self.calls.append(path)
        self.refs.add(ref)
        if path in self.fail_paths:
            raise DownloadError(f"Failed to fetch {path}: connection reset")
        node = self._node(path)
        name = path.rstrip("/").split("/")[-1]
        if isinstance(node, bytes):
            return RemoteFile(path=path, name=name, content=node)
        entries: list[RemoteEntry] = []
        for child, value in node.items():
            child_path = f"{path}/{child}"
            if isinstance(value, dict):
                entries.append(RemoteDirectory(path=child_path, name=child))
            else:
                entries.append(RemoteFile(path=child_path, name=child))
        return entries


class FlakyFileSystem(LocalFileSystem):
    """LocalFileSystem that can fail selected renames."""

    def __init__(self):
        self.fail_rename: Optional[Callable[[Path, Path], bool]] = None
        self.renames: list[tuple[Path, Path]] = []

    def rename(self, src: Path, dst: Path) -> None:
        self.renames.append((Path(src), Path(dst)))
        if self.fail_rename is not None and self.fail_rename(Path(src), Path(dst)):
            raise OSError(f"simulated rename failure: {src} -> {dst}")
        super().rename(src, dst)


class FakeProvider(LLMProvider):
    """Scripted provider recording every request."""

    def __init__(self, fragments=("Hello", ", ", "world"), fail_stream: bool = False):
        self.fragments = list(fragments)
        self.fail_stream = fail_stream
        self.fail_complete = False
        self.completions: list[list] = []
        self.streams: list[tuple[list, Optional[LLMConfig]]] = []

    @property
    def name(self) -> str:
        return "fake"

    @property
    def default_model(self) -> str:
        return "fake-model"

    def is_available(self) -> bool:
        return True

    def complete(self, messages, config=None) -> LLMResponse:
        self.completions.append(list(messages))
        if self.fail_complete:
            raise LLMConnectionError("provider offline")
        return LLMResponse(text=f"analysis {len(self.completions)}", model="fake-model")

    def stream(self, messages, config=None):
        self.streams.append((list(messages), config))
        for i, fragment in enumerate(self.fragments):
            if self.fail_stream and i == 1:
                raise LLMConnectionError("stream dropped")
            yield fragment


def snapshot(root: Path) -> dict[str, bytes]:
    """Relative path -> bytes for every file under root."""
    return {
        p.relative_to(root).as_posix(): p.read_bytes()
        for p in sorted(root.rglob("*"))
        if p.is_file()
    }


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def sample_project(temp_dir: Path) -> Path:
    """A small project tree with code, docs and directories that must be skipped."""
    root = temp_dir / "project-frontend"
    (root / "src" / "components").mkdir(parents=True)
    (root / "src" / "App.tsx").write_text("export const App = () => null;\n")
    (root / "src" / "components" / "Button.ts").write_text("export function Button() {}\n")
    (root / "README.md").write_text("# Frontend\n")
    (root / "package.json").write_text('{"name": "frontend"}\n')
    (root / "logo.png").write_bytes(b"\x89PNG\r\n\x1a\n")
    (root / "node_modules" / "react").mkdir(parents=True)
    (root / "node_modules" / "react" / "index.js").write_text("module.exports = {};\n")
    (root / ".git").mkdir()
    (root / ".git" / "notes.txt").write_text("internal\n")
    return root


@pytest.fixture
def remote_tree() -> Tree:
    return {
        "project-frontend": {
            "index.ts": b"export const version = 2;\n",
            "README.md": b"# Frontend v2\n",
            "src": {
                "app.ts": b"console.log('app');\n",
                "lib": {"util.ts": b"export const x = 1;\n"},
            },
        },
        "project-backend": {
            "server.py": b"print('hello')\n",
        },
        "documentation": {
            "guide.md": b"# Guide\n",
        },
    }


@pytest.fixture
def fake_remote(remote_tree: Tree) -> FakeRemote:
    return FakeRemote(remote_tree)


@pytest.fixture
def flaky_fs() -> FlakyFileSystem:
    return FlakyFileSystem()


@pytest.fixture
def codebase_root(temp_dir: Path) -> Path:
    """Codebase root with an existing live copy of project-frontend."""
    root = temp_dir / "codebase"
    live = root / "project-frontend"
    (live / "src").mkdir(parents=True)
    (live / "index.ts").write_text("export const version = 1;\n")
    (live / "src" / "old.ts").write_text("// removed upstream\n")
    return root
