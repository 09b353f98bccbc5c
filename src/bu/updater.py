"""
Update support for a git-managed utilities directory.

``bu check`` compares the local checkout with ``origin/<release>``;
``bu update`` pulls, optionally stashing local changes around the pull.
"""

from __future__ import annotations

import hashlib
import logging
import subprocess
import time
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from bu.config import BU_HOME
from bu.core.exceptions import UpdateError

logger = logging.getLogger(__name__)

# Last-check stamps live outside the work tree so git never sees them
STAMP_DIR = BU_HOME / "update_checks"


@dataclass
class UpdateStatus:
    """Comparison of the local checkout with the tracked remote branch."""

    branch: str
    local_head: str
    remote_head: str
    behind: int = 0
    latest_message: str = ""
    local_date: str = ""

    @property
    def up_to_date(self) -> bool:
        return self.local_head == self.remote_head


def _git(repo: Path, *args: str) -> subprocess.CompletedProcess:
    logger.debug(f"git {' '.join(args)} (in {repo})")
    return subprocess.run(
        ["git", *args],
        cwd=repo,
        capture_output=True,
        text=True,
    )


def _git_out(repo: Path, *args: str) -> str:
    result = _git(repo, *args)
    if result.returncode != 0:
        raise UpdateError(f"git {' '.join(args)} failed: {result.stderr.strip()}")
    return result.stdout.strip()


def is_git_repo(repo: Path) -> bool:
    """Check whether a directory is inside a git work tree."""
    if not repo.is_dir():
        return False
    try:
        result = _git(repo, "rev-parse", "--is-inside-work-tree")
    except FileNotFoundError:
        return False
    return result.returncode == 0 and result.stdout.strip() == "true"


def has_local_changes(repo: Path) -> bool:
    """Whether tracked files differ from HEAD. Untracked files are ignored."""
    return bool(_git_out(repo, "status", "--porcelain", "--untracked-files=no"))


def _stash_top(repo: Path) -> str:
    """Object name of the newest stash entry, empty when there is none."""
    return _git(repo, "rev-parse", "-q", "--verify", "refs/stash").stdout.strip()


def check_updates(
    repo: Path,
    branch: str = "main",
    stamp_dir: Path | None = None,
) -> UpdateStatus:
    """Fetch the release branch and compare it with HEAD.

    Raises:
        UpdateError: if the directory is not a git repository or git fails.
    """
    if not is_git_repo(repo):
        raise UpdateError(f"{repo} is not a git repository. Cannot check for updates.")

    fetched = _git(repo, "fetch", "origin", branch)
    if fetched.returncode != 0:
        raise UpdateError(f"Failed to fetch origin/{branch}: {fetched.stderr.strip()}")

    local_head = _git_out(repo, "rev-parse", "HEAD")
    remote_head = _git_out(repo, "rev-parse", f"origin/{branch}")
    status = UpdateStatus(
        branch=branch,
        local_head=local_head,
        remote_head=remote_head,
        local_date=_git_out(repo, "log", "-1", "--format=%cd", "--date=relative"),
    )
    if not status.up_to_date:
        status.behind = int(_git_out(repo, "rev-list", "--count", f"HEAD..origin/{branch}") or 0)
        status.latest_message = _git_out(repo, "log", "-1", "--format=%s", f"origin/{branch}")

    record_update_check(repo, stamp_dir=stamp_dir)
    return status


def update(
    repo: Path,
    branch: str = "main",
    auto_stash: bool = False,
    stamp_dir: Path | None = None,
) -> UpdateStatus:
    """Pull the release branch into the utilities directory.

    Local changes are stashed before the pull and re-applied afterwards only
    when ``auto_stash`` is set; otherwise the update is refused. Only a stash
    entry created here is popped.

    Raises:
        UpdateError: on refusal or any failing git step.
    """
    status = check_updates(repo, branch, stamp_dir=stamp_dir)
    if status.up_to_date:
        logger.info("Utilities are already up to date.")
        return status

    stashed = False
    if has_local_changes(repo):
        if not auto_stash:
            raise UpdateError(
                "Not updating due to local changes. "
                "Commit or stash them, or enable auto_stash."
            )
        logger.info("Auto-stashing changes before update...")
        before = _stash_top(repo)
        message = f"bu auto-update stash {datetime.now():%Y-%m-%d %H:%M:%S}"
        stash = _git(repo, "stash", "push", "-m", message)
        if stash.returncode != 0:
            raise UpdateError(f"Failed to stash local changes. Update aborted: {stash.stderr.strip()}")
        after = _stash_top(repo)
        stashed = bool(after) and after != before
        if not stashed:
            logger.debug("Nothing was stashed.")

    pulled = _git(repo, "pull", "origin", branch)
    if stashed:
        logger.info("Applying stashed changes back...")
        popped = _git(repo, "stash", "pop")
        if popped.returncode != 0:
            logger.warning(
                "Failed to apply stashed changes. They remain in the stash "
                "('git stash list' / 'git stash apply' to recover them)."
            )
    if pulled.returncode != 0:
        raise UpdateError(f"git pull failed: {pulled.stderr.strip()}")

    logger.info(f"Updated {status.behind} commit(s) from origin/{branch}.")
    return status


def stamp_file(repo: Path, stamp_dir: Path | None = None) -> Path:
    """Location of the last-check stamp for a repository."""
    key = hashlib.sha1(str(Path(repo).resolve()).encode()).hexdigest()[:16]
    return (stamp_dir or STAMP_DIR) / f"{key}.last_update_check"


def record_update_check(
    repo: Path,
    now: float | None = None,
    stamp_dir: Path | None = None,
) -> None:
    """Write the timestamp of the last update check."""
    stamp = stamp_file(repo, stamp_dir)
    stamp.parent.mkdir(parents=True, exist_ok=True)
    stamp.write_text(f"{int(now if now is not None else time.time())}\n")


def update_check_due(
    repo: Path,
    frequency: int,
    now: float | None = None,
    stamp_dir: Path | None = None,
) -> bool:
    """Whether ``frequency`` seconds have passed since the last recorded check."""
    stamp = stamp_file(repo, stamp_dir)
    if not stamp.exists():
        return True
    try:
        last = int(stamp.read_text().strip() or 0)
    except ValueError:
        return True
    current = now if now is not None else time.time()
    return current - last >= frequency
