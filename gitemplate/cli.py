#!/usr/bin/env python3
"""gitemplate CLI - create a new git repository from a template repository."""
from typing import Optional

import typer
from rich.console import Console

from gitemplate.cli_support import (
    handle_cli_error,
    handle_fatal_exception,
    handle_result_failure,
    print_info,
    print_success,
)
from gitemplate.core.config import (
    GitemplateConfig,
    GitemplateError,
    load_vars_file,
    parse_json_vars,
)
from gitemplate.core.logger import setup_logging
from gitemplate.core.orchestrator import Gitemplate

app = typer.Typer(
    name="gitemplate",
    help="""gitemplate - Git cloning with template variables

Clones a template repo, replaces gitemplate_<key> macros in file contents
and file/directory names, then starts a fresh git history.

Example:
  gitemplate -n my-proj -s git@github.com:me/tpl.git -d ~/dev/my-proj -r me/my-proj
""",
    add_completion=False,
)

console = Console()


@app.command()
def scaffold(
    name: str = typer.Option(..., "--name", "-n", help="Project name (gitemplate_name)"),
    src: str = typer.Option(..., "--src", "-s", help="Source template repository URL or path"),
    dst: str = typer.Option(..., "--dst", "-d", help="Destination directory (must not exist)"),
    desc: str = typer.Option("", "--desc", "-D", help="Project description (gitemplate_desc)"),
    repo: str = typer.Option("", "--repo", "-r", help="GitHub user/project; sets gitemplate_repo and the remote"),
    json_vars: str = typer.Option("{}", "--json", "-j", help="Custom variables as a JSON object"),
    vars_file: Optional[str] = typer.Option(None, "--vars-file", "-f", help="Custom variables from a YAML/JSON file"),
    commit: str = typer.Option("", "--commit", "-c", help="Check out this commit of the template"),
    noinit: bool = typer.Option(False, "--noinit", "-I", help="Skip git init and remote setup"),
    strict_renames: bool = typer.Option(False, "--strict-renames", help="Abort when a file/dir rename fails"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Trace every shell command"),
    log_file: Optional[str] = typer.Option(None, "--log-file", help="Also write logs to this file"),
):
    """Clone a template repository and fill in its macros."""
    setup_logging(verbose=verbose, log_file=log_file)

    try:
        custom_vars = load_vars_file(vars_file) if vars_file else {}
        custom_vars.update(parse_json_vars(json_vars))

        config = GitemplateConfig.from_options(
            name,
            src,
            dst,
            desc=desc,
            repo=repo,
            custom_vars=custom_vars,
            commit=commit,
            verbose=verbose,
            no_init=noinit,
            strict_renames=strict_renames,
        )
    except GitemplateError as e:
        handle_cli_error(e, console, verbose=verbose)

    try:
        result = Gitemplate(config).run()
    except GitemplateError as e:
        handle_cli_error(e, console, verbose=verbose)
    except Exception as e:
        handle_fatal_exception(e, console, verbose=verbose)

    if not result.ok:
        handle_result_failure(result, console)

    print_success(console, f"Created {config.dst}")
    if config.no_init:
        print_info(console, "Skipped git init (--noinit)")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
