# minigit

A small version control system that keeps its history in a `.minigit`
directory next to your files. File contents are stored as blobs named by
their SHA-1 hash. Commits have one or two parents. Branches, checkouts and
three-way merges with conflict markers are supported.

## Installation

```
pip install .
```

This installs the `minigit` command. The package needs nothing beyond
the Python standard library.

## Command line

Run every command from the top of your working directory. The directory
where you run a command is taken as the root of the working tree.

```
minigit init                      Initialize a new repository.
minigit add <filepath>            Add a file to the staging area.
minigit commit -m "<message>"     Record changes to the repository.
minigit log                       Show commit history.
minigit branch <branch-name>      Create a new branch.
minigit checkout <name>           Switch branches or restore working tree files.
minigit merge <branch-name>       Join two development histories together.
```

If you run `minigit` with no arguments, it prints this list and exits with
status 1. A malformed command, an unknown command or a failed operation
prints `Error: ...` to standard error and exits with status 1. Every
command except `init` must be run inside a repository.

The words after `commit -m` are joined with single spaces to form the
commit message.

A typical session:

```
minigit init
echo "hello" > notes.txt
minigit add notes.txt
minigit commit -m "First notes"
minigit branch feature
minigit checkout feature
echo "more" >> notes.txt
minigit add notes.txt
minigit commit -m "Extend notes"
minigit checkout main
minigit merge feature
minigit log
```

### How it behaves

- **Staging and commits.** A commit records exactly the files in the
  staging area. After a commit, the staging area is emptied. The next
  commit therefore holds only the files added since then. `checkout` and
  merges reset the staging area to the snapshot they produce. If nothing
  is staged, `commit` reports that there is nothing to commit.
- **Branches and checkout.** The first branch is `main`. `branch` creates
  a branch at the current commit and needs at least one commit to exist.
  `checkout` takes a branch name or a full commit hash. Checking out a
  commit hash leaves HEAD detached.
- **Log.** `log` follows first parents back from HEAD. For each commit it
  shows the hash, the author, the date and the message. Merge commits also
  show a `Merge:` line with both parents.
- **Merging.** Merging is refused while HEAD is detached.
  - If the other branch is already contained in the current one, the
    merge reports "Already up to date."
  - If the current branch is contained in the other, the merge is a
    fast-forward.
  - Otherwise the common ancestor with the latest timestamp is found, and
    each file is merged three ways.
  - Where both sides changed a file differently, or one side deleted what
    the other changed, the file is written with `<<<<<<< HEAD`,
    `||||||| base`, `=======` and `>>>>>>> MERGE_BRANCH` markers. In that
    case no merge commit is made.
  - A clean merge creates a merge commit authored by `MiniGit Merge`.

Checkout and fast-forward clear the top of the working directory. They
delete every entry whose name is not in the target snapshot, and every
subdirectory, except `.minigit`. Then they write the snapshot's files.
Commit or move anything you want to keep first.

## Library use

```python
from pathlib import Path
from minigit.repository import Repository

repo = Repository(Path("project"))
repo.init()
repo.add("notes.txt")          # path relative to the repository root
repo.commit("First notes")
for commit in repo.history():
    print(commit.short_hash(), commit.message)
```

### `Repository`

`Repository(root, out, err)` writes informational messages to `out` and
warnings to `err`. These default to standard output and standard error.
Failures raise `minigit.utils.MiniGitError`.

Its methods include `read_index`, `write_index`, `head_commit_hash`,
`get_commit`, `read_blob`, `branch`, `checkout` and `merge`.

### Other modules

- **`minigit.merge`**:
  - `is_ancestor` and `find_lca` walk a commit graph through a loader
    function that you supply.
  - `apply_merge_changes` returns a `MergeResult` with the merged
    snapshot, the conflict file contents and a message per path.
  - `conflict_text` builds a file with conflict markers.
- **`minigit.commit`**: `Commit` reads and writes the commit object text
  format with `Commit.parse` and `Commit.serialize`.
- **`minigit.utils`**: provides `sha1`, `read_file`, `write_file`,
  `create_directory`, `compress`/`decompress` (zlib) and
  `is_minigit_repo`.

## What it does not do

- There are no `status`, `diff`, `rm` or `reset` commands.
- Merge conflicts are marked per file and are not resolved line by line.
- The commit author is fixed, and there is no configuration.
- Objects are stored uncompressed.
- There is no remote or network support.