"""Fixed scaffolding pipeline: clone, substitute, hook, re-init, remote."""
import json
from typing import Callable, List, Optional, Tuple

from gitemplate.core.config import GitemplateConfig
from gitemplate.core.logger import get_logger
from gitemplate.core.results import CommandResult, ExecutionEvent
from gitemplate.core.shell import ShellExecutor
from gitemplate.core.template_engine import TemplateEngine
from gitemplate.services.git_manager import GitManager

logger = get_logger(__name__)


def log_shell_event(event: ExecutionEvent) -> None:
    """Observer used in verbose mode: log each shell call."""
    logger.debug(f"{event.method}({json.dumps(list(event.arguments))})")


class Gitemplate:
    """Runs one scaffolding job end to end.

    Usage:

        config = GitemplateConfig.from_options("my-proj", src, dst)
        result = Gitemplate(config).run()
        if not result.ok:
            ...
    """

    def __init__(self, config: GitemplateConfig, shell: Optional[ShellExecutor] = None):
        self.config = config
        if shell is None:
            shell = ShellExecutor(observer=log_shell_event if config.verbose else None)
        self.shell = shell
        self.engine = TemplateEngine(config, shell)
        self.git = GitManager(config, shell)

    def steps(self) -> List[Tuple[str, Callable[[], CommandResult]]]:
        """Pipeline steps for the current configuration, in order."""
        steps = [
            ("clone", self.git.clone_repo),
            ("replace content", self.engine.replace_content_vars),
            ("replace names", self.engine.replace_name_vars),
            ("post-replace hook", self.git.run_post_replace),
        ]
        if not self.config.no_init:
            steps.append(("init", self.git.init_repo))
            if self.config.repo:
                steps.append(("set origin", self.git.set_github_origin))
        return steps

    def run(self) -> CommandResult:
        """Run every step, stopping at the first failure.

        Returns:
            The failing step's result, or the last step's result on success
        """
        res = CommandResult.success()
        for label, step in self.steps():
            logger.debug(f"Step: {label}")
            res = step()
            if not res.ok:
                logger.error(f"Step '{label}' failed (code {res.code})")
                return res
        return res
