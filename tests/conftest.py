"""
Shared fixtures for the repomix MCP server tests.

Provides:
- A temporary project directory used as the allowed directory
- Settings that run tests/fake_repomix.py instead of `npx repomix`
- A recorder for the argv the fake tool was called with
"""
import json
import sys
from pathlib import Path

import pytest

from repomix_mcp.core.config import Settings

FAKE_REPOMIX = Path(__file__).parent / "fake_repomix.py"

_FAKE_VARS = (
    "FAKE_REPOMIX_ARGS_FILE",
    "FAKE_REPOMIX_CONTENT",
    "FAKE_REPOMIX_SIZE",
    "FAKE_REPOMIX_NO_OUTPUT",
    "FAKE_REPOMIX_STDERR",
    "FAKE_REPOMIX_SLEEP",
    "FAKE_REPOMIX_CHILD_SLEEP",
    "FAKE_REPOMIX_EXIT",
)


class ArgsRecorder:
    """Reads back what fake_repomix.py recorded about its invocation."""

    def __init__(self, path: Path):
        self.path = path

    def load(self) -> dict:
        return json.loads(self.path.read_text(encoding="utf-8"))

    @property
    def argv(self) -> list[str]:
        return self.load()["argv"]

    @property
    def output_path(self) -> Path:
        argv = self.argv
        return Path(argv[argv.index("--output") + 1])


@pytest.fixture(autouse=True)
def _clean_fake_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _FAKE_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """A small project tree to act as the allowed directory."""
    root = tmp_path / "project"
    (root / "src" / "pkg").mkdir(parents=True)
    (root / "README.md").write_text("# demo\n", encoding="utf-8")
    (root / "src" / "pkg" / "mod.py").write_text("x = 1\n", encoding="utf-8")
    return root


@pytest.fixture
def outside(tmp_path: Path) -> Path:
    """A directory next to, but not inside, the project."""
    other = tmp_path / "outside"
    other.mkdir()
    (other / "secret.txt").write_text("nope\n", encoding="utf-8")
    return other


@pytest.fixture
def fake_command() -> tuple[str, ...]:
    return (sys.executable, str(FAKE_REPOMIX))


@pytest.fixture
def settings(project: Path, fake_command: tuple[str, ...]) -> Settings:
    return Settings(allowed_directory=project, command=fake_command, timeout=30)


@pytest.fixture
def recorder(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> ArgsRecorder:
    path = tmp_path / "argv.json"
    monkeypatch.setenv("FAKE_REPOMIX_ARGS_FILE", str(path))
    return ArgsRecorder(path)
