"""Macro substitution over a cloned template tree.

Two passes run in order:

1. Content: one ``find | perl`` substitution per macro across every file.
2. Path names: rename directories, then files, whose names hold a macro.

Content substitution never changes paths, so it is safe to run first.
Directory renames move every descendant, so for each key all directory
renames finish before the tree is listed again for file renames.
"""
import os
import re
import shlex
from typing import List

from gitemplate.core.config import GitemplateConfig, macro_token
from gitemplate.core.logger import get_logger
from gitemplate.core.results import CommandResult
from gitemplate.core.shell import ShellExecutor

logger = get_logger(__name__)

CONTENT_CMD = "find {dst} -type f -exec perl -p -i -e '{expr}' {{}} \\;"

# Characters with meaning inside a perl s/// expression
_REGEXP_SPECIAL = re.compile(r"([.*+?=^!:${}()|\[\]/\\@])")


def escape_regexp(value: str) -> str:
    """Backslash-escape characters that are special in a perl s/// expression."""
    return _REGEXP_SPECIAL.sub(r"\\\1", str(value))


def quote_single(value: str) -> str:
    """Make text safe inside a single-quoted shell argument."""
    return value.replace("'", "'\\''")


def build_content_command(dst: str, key: str, value: str) -> str:
    """Return the shell command replacing one macro in every file under dst."""
    expr = f"s/{escape_regexp(macro_token(key))}/{escape_regexp(value)}/gi"
    return CONTENT_CMD.format(dst=shlex.quote(dst), expr=quote_single(expr))


class TemplateEngine:
    """Replaces ``gitemplate_<key>`` macros in file contents and path names."""

    def __init__(self, config: GitemplateConfig, shell: ShellExecutor):
        self.config = config
        self.shell = shell

    def replace_content_vars(self) -> CommandResult:
        """Replace macros found in file contents.

        Keys with empty values are skipped. The first failing command
        stops the pass and is returned.
        """
        dst = self.config.dst
        res = CommandResult.success()

        for key, value in self.config.content_bindings():
            if not value:
                logger.debug(f"Skipping empty macro {macro_token(key)}")
                continue
            res = self.shell.exec(build_content_command(dst, key, value))
            if not res.ok:
                logger.error(f"Content replacement for {macro_token(key)} failed (code {res.code})")
                return res

        return res

    def replace_name_vars(self) -> CommandResult:
        """Replace macros found in directory and file names."""
        for key, value in self.config.name_bindings():
            if not value:
                continue
            pattern = re.compile(re.escape(macro_token(key)), re.IGNORECASE)

            # Directories first; a directory rename invalidates descendant paths
            res = self._rename_matches(pattern, value, self.shell.test_is_dir)
            if not res.ok:
                return res
            res = self._rename_matches(pattern, value, self.shell.test_is_file)
            if not res.ok:
                return res

        return CommandResult.success()

    def _find_targets(self, pattern: re.Pattern, kind_test) -> List[str]:
        dst = self.config.dst
        targets = [
            path for path in self.shell.find(dst)
            if path != dst and pattern.search(os.path.basename(path)) and kind_test(path)
        ]
        # Deepest first so renaming one entry never moves another target
        return sorted(targets, key=lambda p: p.count(os.sep), reverse=True)

    def _rename_matches(self, pattern: re.Pattern, value: str, kind_test) -> CommandResult:
        for target in self._find_targets(pattern, kind_test):
            parent, base = os.path.split(target)
            renamed = os.path.join(parent, pattern.sub(lambda _: value, base))
            res = self.shell.move(target, renamed)
            if res.ok:
                logger.debug(f"Renamed {target} -> {renamed}")
                continue
            if self.config.strict_renames:
                logger.error(f"Rename failed: {target} -> {renamed}: {res.output}")
                return res
            logger.warning(f"Rename failed, continuing: {target} -> {renamed}: {res.output}")
        return CommandResult.success()
