"""Command-line entry point for the ``minigit`` tool."""

from __future__ import annotations

import sys
from functools import reduce
from typing import Callable, Dict, List, Optional, Sequence

from minigit.repository import Repository
from minigit.utils import MiniGitError, is_minigit_repo

_USAGE = """\
Usage: minigit <command> [args...]

Available commands:
  init                      Initialize a new repository.
  add <filepath>            Add a file to the staging area.
  commit -m "<message>"   Record changes to the repository.
  log                       Show commit history.
  branch <branch-name>      Create a new branch.
  checkout <name>           Switch branches or restore working tree files.
  merge <branch-name>       Join two or more development histories together."""


class _UsageError(Exception):
    """Raised for a malformed command line."""


def usage() -> str:
    """Return the usage text listing the available commands."""
    return _USAGE


def _join_message(words: Sequence[str]) -> str:
    return reduce(lambda acc, word: word if not acc else f"{acc} {word}", words, "")


def _require(args: List[str], minimum: int, text: str) -> None:
    if len(args) < minimum:
        raise _UsageError(f"Invalid usage. Usage: {text}")


def _cmd_add(repo: Repository, args: List[str]) -> None:
    _require(args, 2, "minigit add <filepath>")
    repo.add(args[1])


def _cmd_commit(repo: Repository, args: List[str]) -> None:
    if len(args) < 3 or args[1] != "-m":
        raise _UsageError('Invalid usage. Usage: minigit commit -m "<message>"')
    message = _join_message(args[2:])
    if not message:
        raise _UsageError("Commit message cannot be empty.")
    repo.commit(message)


def _cmd_log(repo: Repository, args: List[str]) -> None:
    if len(args) != 1:
        raise _UsageError("Invalid usage. Usage: minigit log")
    repo.log()


def _cmd_branch(repo: Repository, args: List[str]) -> None:
    _require(args, 2, "minigit branch <branch-name>")
    repo.branch(args[1])


def _cmd_checkout(repo: Repository, args: List[str]) -> None:
    _require(args, 2, "minigit checkout <branch-name-or-commit-hash>")
    repo.checkout(args[1])


def _cmd_merge(repo: Repository, args: List[str]) -> None:
    _require(args, 2, "minigit merge <branch-name>")
    repo.merge(args[1])


_COMMANDS: Dict[str, Callable[[Repository, List[str]], None]] = {
    "add": _cmd_add,
    "commit": _cmd_commit,
    "log": _cmd_log,
    "branch": _cmd_branch,
    "checkout": _cmd_checkout,
    "merge": _cmd_merge,
}


def _run(args: List[str]) -> None:
    command = args[0]
    repo = Repository()
    if command == "init":
        if len(args) != 1:
            raise _UsageError("Invalid usage. Usage: minigit init")
        repo.init()
        return
    if not is_minigit_repo():
        raise _UsageError("Not a MiniGit repository. Run 'minigit init' first.")
    handler = _COMMANDS.get(command)
    if handler is None:
        raise _UsageError(f"Unknown command: '{command}'")
    handler(repo, args)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run one command; return the process exit status."""
    args = list(sys.argv[1:] if argv is None else argv)
    if not args:
        print(usage())
        return 1
    try:
        _run(args)
    except (_UsageError, MiniGitError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())