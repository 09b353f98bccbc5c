# Description: Utilities for git operations on the main repo and submodules
# -----------------------------------------------------------------------------
# START_OF_USAGE
# Utility: Git shortcuts for the main repo and its submodules
#
# Main Commands:
#   git_update [-r]       : Pull the main repo, -r also updates submodules
#
# Examples:
#   bu run git_update -r
# END_OF_USAGE
# -----------------------------------------------------------------------------
import logging
import subprocess

from bu.core import shell_alias

logger = logging.getLogger("bu.util.git")

gs = shell_alias("git status -sb")  # Short git status with branch info
gl = shell_alias("git log --oneline -20")  # Last 20 commits, one per line
gd = shell_alias("git diff")  # Show unstaged changes


def git_update(*args):  # Git update for main repo and submodules
    logger.info("Updating main repository...")
    if subprocess.run(["git", "pull"]).returncode != 0:
        logger.error("Main repo update failed.")
        return 1
    if "-r" in args:
        logger.info("Updating all submodules...")
        cmd = ["git", "submodule", "update", "--init", "--recursive", "--remote"]
        if subprocess.run(cmd).returncode != 0:
            logger.error("Submodule update failed.")
            return 1
    return 0
