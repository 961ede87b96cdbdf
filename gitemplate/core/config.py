"""gitemplate run configuration and custom variable loading."""
import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

import yaml

# Built-in macro keys, in content substitution order
BUILTIN_KEYS = ("name", "desc", "repo", "year", "originSha", "originUrl")

MACRO_PREFIX = "gitemplate_"


class GitemplateError(Exception):
    """Base class for internal gitemplate errors."""


class ConfigError(GitemplateError):
    """Raised when the run configuration is incomplete or malformed."""


class VarsFileError(GitemplateError):
    """Raised when custom variables cannot be loaded."""


def macro_token(key: str) -> str:
    """Return the literal placeholder for a macro key."""
    return f"{MACRO_PREFIX}{key}"


def _current_year() -> str:
    return str(datetime.now(timezone.utc).year)


@dataclass
class GitemplateConfig:
    """Settings for one scaffolding run.

    The user-facing fields are fixed once validate() passes. ``origin_sha``
    and ``origin_url`` are filled in by GitManager.clone_repo().

    Attributes:
        name: ``gitemplate_name`` replacement value
        src: Source repository URL or path
        dst: Clone destination (must not exist yet)
        desc: ``gitemplate_desc`` replacement value
        repo: GitHub ``owner/project`` slug; also enables the remote
        json: Custom key/value macros, applied in insertion order
        commit: Optional commit-ish to check out after cloning
        verbose: Trace every shell call
        no_init: Skip ``git init`` and the remote
        strict_renames: Abort when a path rename fails
        year: ``gitemplate_year`` replacement value (UTC)
    """

    name: str
    src: str
    dst: str
    desc: str = ""
    repo: str = ""
    json: Dict[str, str] = field(default_factory=dict)
    commit: str = ""
    verbose: bool = False
    no_init: bool = False
    strict_renames: bool = False
    year: str = field(default_factory=_current_year)
    origin_sha: str = ""
    origin_url: str = ""

    @classmethod
    def from_options(
        cls,
        name: Optional[str],
        src: Optional[str],
        dst: Optional[str],
        *,
        desc: Optional[str] = None,
        repo: Optional[str] = None,
        custom_vars: Optional[Mapping[str, Any]] = None,
        commit: Optional[str] = None,
        verbose: bool = False,
        no_init: bool = False,
        strict_renames: bool = False,
    ) -> "GitemplateConfig":
        """Build a validated config from raw CLI-style values."""
        config = cls(
            name=name or "",
            src=src or "",
            dst=str(Path(dst).expanduser().resolve()) if dst else "",
            desc=desc or "",
            repo=repo or "",
            json=normalize_vars(custom_vars or {}),
            commit=commit or "",
            verbose=verbose,
            no_init=no_init,
            strict_renames=strict_renames,
        )
        config.validate()
        return config

    def validate(self) -> None:
        """Raise ConfigError if a required field is missing."""
        missing = [key for key in ("name", "src", "dst") if not getattr(self, key)]
        if missing:
            raise ConfigError(f"Missing required option(s): {', '.join(missing)}")
        for key in self.json:
            if not key:
                raise ConfigError("Custom variable names must not be empty")

    def get(self, key: str) -> str:
        """Return the current value of a built-in macro key."""
        if key not in BUILTIN_KEYS:
            raise KeyError(key)
        attr = {"originSha": "origin_sha", "originUrl": "origin_url"}.get(key, key)
        return str(getattr(self, attr) or "")

    def content_bindings(self) -> List[Tuple[str, str]]:
        """Macro bindings for content substitution, in application order."""
        bindings = [(key, self.get(key)) for key in BUILTIN_KEYS]
        bindings.extend(self.json.items())
        return bindings

    def name_bindings(self) -> List[Tuple[str, str]]:
        """Macro bindings for path renames: ``name`` then custom keys."""
        return [("name", self.name), *self.json.items()]


def normalize_vars(data: Mapping[str, Any]) -> Dict[str, str]:
    """Coerce custom variables to an ordered str -> str mapping."""
    if not isinstance(data, Mapping):
        raise VarsFileError("Custom variables must be a key/value mapping")

    normalized: Dict[str, str] = {}
    for key, value in data.items():
        if value is None:
            value = ""
        elif isinstance(value, bool):
            value = "true" if value else "false"
        elif isinstance(value, (dict, list)):
            raise VarsFileError(f"Custom variable '{key}' must be a scalar value")
        normalized[str(key)] = str(value)
    return normalized


def parse_json_vars(blob: Optional[str]) -> Dict[str, str]:
    """Parse the ``--json`` option into custom variables."""
    if not blob or not blob.strip():
        return {}
    try:
        data = json.loads(blob)
    except json.JSONDecodeError as e:
        raise VarsFileError(f"Invalid --json value: {e}") from e
    if not isinstance(data, dict):
        raise VarsFileError("--json must be a JSON object, e.g. '{\"k1\": \"v1\"}'")
    return normalize_vars(data)


def load_vars_file(path: str) -> Dict[str, str]:
    """Load custom variables from a YAML (or JSON) mapping file.

    Mapping order in the file is preserved.
    """
    vars_path = Path(path).expanduser()
    if not vars_path.exists():
        raise VarsFileError(f"Variables file not found: {vars_path}")

    with open(vars_path) as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise VarsFileError(f"Could not parse {vars_path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise VarsFileError(f"{vars_path} must contain a key/value mapping")
    return normalize_vars(data)
