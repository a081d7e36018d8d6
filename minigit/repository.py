"""A repository on disk: staging, committing, branching, checkout and merging."""

from __future__ import annotations

import shutil
import sys
import time
from pathlib import Path
from typing import Dict, Iterator, Mapping, Optional, TextIO, Union

from minigit.commit import Commit
from minigit.merge import apply_merge_changes, find_lca, is_ancestor
from minigit.utils import REPO_DIR_NAME, MiniGitError, read_file, sha1, write_file

PathLike = Union[str, Path]

REF_PREFIX = "ref: "
DEFAULT_BRANCH = "main"
DEFAULT_AUTHOR = "default_user"
MERGE_AUTHOR = "MiniGit Merge"


def _decode(data: bytes) -> str:
    return data.decode("utf-8", errors="surrogateescape")


class Repository:
    """A repository rooted at a working directory.

    Informational messages go to ``out`` and warnings to ``err``; failures
    raise :class:`MiniGitError`.
    """

    protected_names = frozenset({REPO_DIR_NAME})

    def __init__(
        self,
        root: Optional[PathLike] = None,
        out: Optional[TextIO] = None,
        err: Optional[TextIO] = None,
    ) -> None:
        self.root = Path(root) if root is not None else Path.cwd()
        self.out = out if out is not None else sys.stdout
        self.err = err if err is not None else sys.stderr
        self.repo_dir = self.root / REPO_DIR_NAME
        self.objects_path = self.repo_dir / "objects"
        self.refs_path = self.repo_dir / "refs"
        self.heads_path = self.refs_path / "heads"
        self.head_path = self.repo_dir / "HEAD"
        self.index_path = self.repo_dir / "index"

    # -- output -----------------------------------------------------------

    def _say(self, text: str) -> None:
        print(text, file=self.out)

    def _warn(self, text: str) -> None:
        print(text, file=self.err)

    # -- setup and staging ------------------------------------------------

    def init(self) -> None:
        """Create an empty repository with HEAD pointing at the main branch."""
        self.objects_path.mkdir(parents=True, exist_ok=True)
        self.heads_path.mkdir(parents=True, exist_ok=True)
        write_file(self.head_path, f"{REF_PREFIX}refs/heads/{DEFAULT_BRANCH}")
        write_file(self.index_path, "")
        self._say(f"Initialized empty MiniGit repository in {self.repo_dir}")

    def read_index(self) -> Dict[str, str]:
        """Return the staging area as a mapping of path to blob hash."""
        index: Dict[str, str] = {}
        for line in _decode(read_file(self.index_path)).split("\n"):
            path, sep, blob = line.partition(" ")
            if sep:
                index[path] = blob
        return index

    def write_index(self, index: Mapping[str, str]) -> None:
        """Replace the staging area with ``index``."""
        write_file(
            self.index_path,
            "".join(f"{path} {blob}\n" for path, blob in sorted(index.items())),
        )

    def read_blob(self, blob_hash: str) -> bytes:
        """Return the stored content of a blob, or empty bytes if it is missing."""
        return read_file(self.objects_path / blob_hash)

    def _store_blob(self, content: bytes) -> str:
        blob_hash = sha1(content)
        write_file(self.objects_path / blob_hash, content)
        return blob_hash

    def add(self, filepath: str) -> str:
        """Store ``filepath`` as a blob and stage it; return the blob hash."""
        source = self.root / filepath
        if not source.exists() or source.is_dir():
            raise MiniGitError(
                f"Cannot add '{filepath}'. File does not exist or is a directory."
            )
        blob_hash = self._store_blob(read_file(source))
        self._say(f"Blob created for {filepath} with hash {blob_hash}")
        index = self.read_index()
        index[filepath] = blob_hash
        self.write_index(index)
        self._say(f"Added {filepath} to staging area.")
        return blob_hash

    # -- references -------------------------------------------------------

    def _head_content(self) -> str:
        return _decode(read_file(self.head_path))

    def _current_branch(self) -> Optional[str]:
        head = self._head_content()
        if head.startswith(REF_PREFIX):
            return Path(head[len(REF_PREFIX):]).name
        return None

    def head_commit_hash(self) -> str:
        """Return the hash HEAD resolves to, or ``""`` when there is none."""
        head = self._head_content()
        if not head:
            return ""
        if head.startswith(REF_PREFIX):
            ref_file = self.repo_dir / head[len(REF_PREFIX):]
            if not ref_file.exists():
                return ""
            return _decode(read_file(ref_file))
        return head

    def _update_head(self, commit_hash: str, branch_name: Optional[str]) -> None:
        if branch_name is not None:
            write_file(self.heads_path / branch_name, commit_hash)
            write_file(self.head_path, f"{REF_PREFIX}refs/heads/{branch_name}")
        else:
            write_file(self.head_path, commit_hash)

    # -- commits ----------------------------------------------------------

    def get_commit(self, commit_hash: str) -> Optional[Commit]:
        """Load a commit object, or return ``None`` if it cannot be read."""
        if not commit_hash:
            return None
        data = read_file(self.objects_path / commit_hash)
        if not data:
            return None
        return Commit.parse(commit_hash, data)

    def _store_commit(self, commit: Commit) -> Commit:
        commit.hash = sha1(commit.serialize())
        write_file(self.objects_path / commit.hash, commit.serialize())
        return commit

    def commit(self, message: str) -> Optional[Commit]:
        """Record the staged files as a new commit; ``None`` if nothing is staged."""
        snapshot = self.read_index()
        if not snapshot:
            self._say("Nothing to commit, working tree clean. (Staging area is empty)")
            return None

        new_commit = self._store_commit(
            Commit(
                parent_hash=self.head_commit_hash(),
                message=message,
                author=DEFAULT_AUTHOR,
                timestamp=int(time.time()),
                snapshot=snapshot,
            )
        )

        branch_name = self._current_branch()
        self._update_head(new_commit.hash, branch_name)
        label = branch_name if branch_name is not None else "detached HEAD"
        self._say(f"[{label} {new_commit.short_hash()}] {message}")

        self.write_index({})
        self._say("Committed successfully.")
        return new_commit

    def history(self) -> Iterator[Commit]:
        """Yield commits from HEAD back along first parents."""
        current = self.head_commit_hash()
        while current:
            commit = self.get_commit(current)
            if commit is None:
                return
            yield commit
            current = commit.parent_hash

    def log(self) -> None:
        """Print the first-parent history starting at HEAD."""
        if not self.head_commit_hash():
            self._say("No commits yet.")
            return
        self._say("Commit history:")
        for commit in self.history():
            self._say(f"\ncommit {commit.hash}")
            if commit.is_merge():
                self._say(
                    f"Merge: {commit.parent_hash[:7]} {commit.second_parent_hash[:7]}"
                )
            self._say(f"Author: {commit.author}")
            self._say(f"Date: {time.asctime(time.localtime(commit.timestamp))}")
            self._say(f"\n    {commit.message}")

    # -- branches and checkout --------------------------------------------

    def branch(self, branch_name: str) -> Optional[str]:
        """Create a branch at HEAD; return its commit hash, or ``None`` if it exists."""
        if not branch_name:
            raise MiniGitError("Branch name cannot be empty.")
        branch_file = self.heads_path / branch_name
        if branch_file.exists():
            self._say(f"Branch '{branch_name}' already exists.")
            return None
        current = self.head_commit_hash()
        if not current:
            raise MiniGitError("Cannot create branch. No commits yet.")
        write_file(branch_file, current)
        self._say(f"Branch '{branch_name}' created at {current[:7]}")
        return current

    def _restore_tree(self, snapshot: Mapping[str, str], warn: bool) -> None:
        for entry in self.root.iterdir():
            if entry.name in self.protected_names:
                continue
            is_dir = entry.is_dir() and not entry.is_symlink()
            if entry.name not in snapshot or is_dir:
                if is_dir:
                    shutil.rmtree(entry)
                else:
                    entry.unlink()
        for path, blob_hash in sorted(snapshot.items()):
            content = self.read_blob(blob_hash)
            write_file(self.root / path, content)
            if not content and warn:
                self._warn(
                    f"Warning: Could not fully restore file {path} "
                    f"(blob {blob_hash}) or it was empty."
                )

    def checkout(self, target: str) -> Commit:
        """Switch to a branch or a commit hash and restore its files."""
        branch_file = self.heads_path / target
        if branch_file.exists():
            target_hash = _decode(read_file(branch_file))
            new_head = f"{REF_PREFIX}refs/heads/{target}"
            self._say(f"Switching to branch '{target}'")
        else:
            if not (self.objects_path / target).exists():
                raise MiniGitError(
                    f"Reference '{target}' not found. Not a branch or a valid commit hash."
                )
            target_hash = target
            new_head = target
            self._say("Note: switching to 'detached HEAD' state.")

        target_commit = self.get_commit(target_hash)
        if target_commit is None:
            raise MiniGitError(f"Could not retrieve commit object for {target_hash}")

        self._restore_tree(target_commit.snapshot, warn=True)
        write_file(self.head_path, new_head)
        self.write_index(target_commit.snapshot)
        self._say(f"HEAD is now at {target_hash[:7]}")
        return target_commit

    # -- merging ----------------------------------------------------------

    def merge(self, branch_name: str) -> Optional[Commit]:
        """Merge ``branch_name`` into the current branch.

        Returns the new head commit after a fast-forward or a clean merge,
        and ``None`` when nothing changed or conflicts were left to resolve.
        """
        if not branch_name:
            raise MiniGitError("Merge branch name cannot be empty.")
        current_branch = self._current_branch()
        if current_branch is None:
            raise MiniGitError(
                "Cannot merge in a detached HEAD state. Please checkout a branch first."
            )
        if current_branch == branch_name:
            self._say("Cannot merge a branch with itself.")
            return None

        merge_branch_file = self.heads_path / branch_name
        if not merge_branch_file.exists():
            raise MiniGitError(f"Branch '{branch_name}' does not exist.")

        current_hash = self.head_commit_hash()
        merge_hash = _decode(read_file(merge_branch_file))
        if not current_hash or not merge_hash:
            raise MiniGitError("Both branches must have at least one commit to merge.")

        current_commit = self.get_commit(current_hash) or Commit()
        merge_commit = self.get_commit(merge_hash) or Commit()

        if is_ancestor(merge_hash, current_hash, self.get_commit):
            self._say("Already up to date.")
            return None

        if is_ancestor(current_hash, merge_hash, self.get_commit):
            self._say("Fast-forward merge detected.")
            self._update_head(merge_hash, current_branch)
            self._restore_tree(merge_commit.snapshot, warn=False)
            self.write_index(merge_commit.snapshot)
            self._say(f"Fast-forward to {merge_hash[:7]}")
            return merge_commit

        self._say("Performing a three-way merge...")
        lca_hash = find_lca(current_hash, merge_hash, self.get_commit)
        if not lca_hash:
            raise MiniGitError(
                f"Could not find a common ancestor between {current_branch} and {branch_name}"
            )
        lca_commit = self.get_commit(lca_hash) or Commit()
        self._say(f"LCA: {lca_hash[:7]}")

        result = apply_merge_changes(
            current_commit.snapshot, merge_commit.snapshot, lca_commit.snapshot, self.read_blob
        )
        for message in result.messages:
            self._say(message)
        for path, text in result.conflict_files.items():
            write_file(self.root / path, text)

        if result.conflicts_occurred:
            self._say("Automatic merge failed; fix conflicts and then commit the result.")
            self.write_index(result.snapshot)
            return None

        self._say("Merge completed successfully. Creating a merge commit.")
        final_snapshot = {
            path: blob if blob else self._store_blob(read_file(self.root / path))
            for path, blob in result.snapshot.items()
        }
        merge_result = self._store_commit(
            Commit(
                parent_hash=current_hash,
                second_parent_hash=merge_hash,
                message=f"Merge branch '{branch_name}' into {current_branch}",
                author=MERGE_AUTHOR,
                timestamp=int(time.time()),
                snapshot=final_snapshot,
            )
        )
        self._update_head(merge_result.hash, current_branch)
        self.write_index(merge_result.snapshot)
        self._say(f"Merge commit created: {merge_result.short_hash()}")
        return merge_result