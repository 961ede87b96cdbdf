"""Shared test fixtures for gitemplate tests."""
import pytest

from gitemplate.core.config import GitemplateConfig
from gitemplate.core.shell import ShellExecutor


@pytest.fixture
def events():
    """Collected ExecutionEvents from the shell fixture."""
    return []


@pytest.fixture
def shell(events):
    """ShellExecutor that records every call."""
    return ShellExecutor(observer=events.append)


@pytest.fixture
def config():
    """Config mirroring a typical CLI invocation."""
    return GitemplateConfig(
        name="my-new-proj",
        src="/src",
        dst="/dst",
        desc="some browser/node proj",
        repo="user/proj",
        json={"m1": "v1", "m2": "v2"},
        year="1970",
    )


@pytest.fixture
def tree_config(tmp_path, config):
    """Config whose dst is a real (empty) directory under tmp_path."""
    dst = tmp_path / "dst"
    dst.mkdir()
    config.dst = str(dst)
    return config
