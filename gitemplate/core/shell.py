"""Observable wrapper around shell and filesystem operations."""
import os
import shutil
import subprocess
from typing import Any, Callable, List, Optional

from gitemplate.core.logger import get_logger
from gitemplate.core.results import CommandResult, ExecutionEvent

logger = get_logger(__name__)

Observer = Callable[[ExecutionEvent], None]


class ShellExecutor:
    """Runs external commands and filesystem operations for the pipeline.

    Every public call is blocking and reports an ExecutionEvent to the
    optional observer before returning. Nonzero results are returned to
    the caller as-is; deciding whether they are fatal is not done here.
    """

    def __init__(self, observer: Optional[Observer] = None, cwd: Optional[str] = None):
        self.observer = observer
        self.cwd = cwd

    def _emit(self, method: str, arguments: tuple, result: Any) -> Any:
        if self.observer is not None:
            self.observer(ExecutionEvent(method=method, arguments=arguments, result=result))
        return result

    def cd(self, path: str) -> CommandResult:
        """Set the working directory used by later exec() calls."""
        if os.path.isdir(path):
            self.cwd = path
            result = CommandResult.success()
        else:
            result = CommandResult.failure(f"No such directory: {path}")
        return self._emit("cd", (path,), result)

    def test_exists(self, path: str) -> bool:
        return self._emit("test", ("-e", path), os.path.lexists(path))

    def test_is_dir(self, path: str) -> bool:
        return self._emit("test", ("-d", path), os.path.isdir(path))

    def test_is_file(self, path: str) -> bool:
        return self._emit("test", ("-f", path), os.path.isfile(path))

    def find(self, root: str) -> List[str]:
        """List root and every path beneath it, parents before children."""
        paths: List[str] = []
        if os.path.lexists(root):
            paths.append(root)
        if os.path.isdir(root):
            for current, dirs, files in os.walk(root):
                paths.extend(os.path.join(current, entry) for entry in dirs + files)
        paths.sort(key=lambda p: p.split(os.sep))
        return self._emit("find", (root,), paths)

    def exec(self, command: str) -> CommandResult:
        """Run a shell command string and capture merged stdout/stderr."""
        try:
            completed = subprocess.run(
                command,
                shell=True,
                cwd=self.cwd,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                check=False,
            )
            result = CommandResult(code=completed.returncode, output=completed.stdout or "")
        except OSError as e:
            logger.error(f"Failed to run command: {e}")
            result = CommandResult.failure(str(e))
        return self._emit("exec", (command,), result)

    def move(self, src: str, dst: str) -> CommandResult:
        """Rename src to dst; never overwrites an existing target."""
        if os.path.lexists(dst):
            result = CommandResult.failure(f"Target already exists: {dst}")
        else:
            try:
                os.rename(src, dst)
                result = CommandResult.success()
            except OSError as e:
                result = CommandResult.failure(str(e))
        return self._emit("mv", (src, dst), result)

    def remove(self, path: str, recursive: bool = False) -> CommandResult:
        """Delete a file, or a whole tree when recursive is set."""
        try:
            if recursive and os.path.isdir(path) and not os.path.islink(path):
                shutil.rmtree(path)
            elif os.path.lexists(path):
                os.remove(path)
            result = CommandResult.success()
        except OSError as e:
            result = CommandResult.failure(str(e))
        flag = "-rf" if recursive else "-f"
        return self._emit("rm", (flag, path), result)
