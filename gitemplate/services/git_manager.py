"""Git repository lifecycle for a scaffolded clone."""
import os
import re
import shlex

from gitemplate.core.config import GitemplateConfig
from gitemplate.core.logger import get_logger
from gitemplate.core.results import CommandResult
from gitemplate.core.shell import ShellExecutor

logger = get_logger(__name__)

POSTREPLACE_SCRIPT = ".gitemplate.postreplace"
SHA_LENGTH = 10
COMMIT_MESSAGE_PREFIX = "Initial commit from gitemplate: "

_FETCH_URL_RE = re.compile(r"Fetch\s+URL:\s*(\S+)")
_UNSAFE_MESSAGE_CHARS = re.compile(r"[^A-Za-z0-9@#:./ -]")


def parse_origin_sha(output: str) -> str:
    """Return the short origin SHA from ``git rev-parse HEAD`` output."""
    return output.strip()[:SHA_LENGTH]


def parse_origin_url(output: str) -> str:
    """Return the fetch URL from ``git remote show origin`` output, or ""."""
    match = _FETCH_URL_RE.search(output)
    return match.group(1) if match else ""


def build_commit_message(origin_url: str, origin_sha: str) -> str:
    """Build the shell-safe initial commit message."""
    message = f"{COMMIT_MESSAGE_PREFIX}{origin_url}#{origin_sha}"
    return _UNSAFE_MESSAGE_CHARS.sub("_", message)


class GitManager:
    """Manages the git operations around template substitution.

    Lifecycle: clone, capture origin metadata, drop ``.git``, (substitution
    happens elsewhere), re-init with a generated commit, add the remote.
    Each method returns a CommandResult; the first nonzero step of a
    method is returned immediately and later steps are not attempted.
    """

    def __init__(self, config: GitemplateConfig, shell: ShellExecutor):
        self.config = config
        self.shell = shell

    def clone_repo(self) -> CommandResult:
        """Clone the template and record where it came from.

        Records ``origin_sha`` and ``origin_url`` on the config, then removes
        ``dst/.git`` so the clone becomes a plain working tree.

        Returns:
            Result of the last step, or the first failure
        """
        dst = self.config.dst
        if self.shell.test_exists(dst):
            logger.error(f"Destination already exists: {dst}")
            return CommandResult.precondition("Destination already exists")

        logger.info(f"Cloning {self.config.src} to {dst}")
        res = self.shell.exec(f"git clone {shlex.quote(self.config.src)} {shlex.quote(dst)}")
        if not res.ok:
            return res

        res = self.shell.cd(dst)
        if not res.ok:
            return res

        if self.config.commit:
            res = self.shell.exec(f"git checkout --quiet {shlex.quote(self.config.commit)}")
            if not res.ok:
                return res

        res = self.shell.exec("git rev-parse HEAD")
        if not res.ok:
            return res
        self.config.origin_sha = parse_origin_sha(res.output)

        res = self.shell.exec("git remote show -n origin")
        if not res.ok:
            return res
        origin_url = parse_origin_url(res.output)
        if not origin_url:
            return CommandResult.failure(f"Could not find origin fetch URL in:\n{res.output}")
        self.config.origin_url = origin_url

        logger.info(f"✓ Cloned {origin_url}#{self.config.origin_sha}")

        rm_res = self.shell.remove(os.path.join(dst, ".git"), recursive=True)
        if not rm_res.ok:
            return rm_res
        return res

    def init_repo(self) -> CommandResult:
        """Start a fresh repository in dst with one commit of every file."""
        res = self.shell.cd(self.config.dst)
        if not res.ok:
            return res

        res = self.shell.exec("git init")
        if res.ok:
            res = self.shell.exec("git add .")
        if res.ok:
            message = build_commit_message(self.config.origin_url, self.config.origin_sha)
            res = self.shell.exec(f'git commit -m "{message}"')
        if res.ok:
            logger.info("✓ Initialized repository with initial commit")
        return res

    def set_github_origin(self) -> CommandResult:
        """Add ``git@github.com:<repo>.git`` as remote ``origin``."""
        res = self.shell.cd(self.config.dst)
        if not res.ok:
            return res

        res = self.shell.exec(
            f"git remote add origin {shlex.quote(f'git@github.com:{self.config.repo}.git')}"
        )
        if res.ok:
            logger.info(f"✓ Remote origin set to git@github.com:{self.config.repo}.git")
        return res

    def run_post_replace(self) -> CommandResult:
        """Run ``.gitemplate.postreplace`` if the template ships one.

        The script runs from dst and is deleted only after it succeeds, so
        a failing hook stays in place for inspection.
        """
        dst = self.config.dst
        script = os.path.join(dst, POSTREPLACE_SCRIPT)
        if not self.shell.test_exists(script):
            return CommandResult.success("No postreplace script to run")

        res = self.shell.cd(dst)
        if not res.ok:
            return res

        logger.info(f"Running {POSTREPLACE_SCRIPT}")
        res = self.shell.exec(shlex.quote(script))
        if not res.ok:
            logger.error(f"{POSTREPLACE_SCRIPT} failed (code {res.code})")
            return res

        rm_res = self.shell.remove(script)
        if not rm_res.ok:
            return rm_res
        return res
