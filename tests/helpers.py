"""Helpers shared by gitemplate tests."""
from pathlib import Path
from typing import Iterable
from unittest.mock import Mock


def make_tree(root: Path, paths: Iterable[str]) -> None:
    """Create files under root; entries ending in '/' become directories."""
    for rel in paths:
        target = root / rel
        if rel.endswith("/"):
            target.mkdir(parents=True, exist_ok=True)
        else:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(f"contents of {rel}\n")


def completed(returncode: int = 0, stdout: str = "") -> Mock:
    """Stand-in for subprocess.CompletedProcess."""
    return Mock(returncode=returncode, stdout=stdout)


def exec_commands(events) -> list:
    """Shell strings passed to exec(), in call order."""
    return [e.arguments[0] for e in events if e.method == "exec"]


def moves(events) -> list:
    """(src, dst) pairs passed to move(), in call order."""
    return [e.arguments for e in events if e.method == "mv"]
