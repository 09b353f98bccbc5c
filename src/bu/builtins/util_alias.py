# Description: File system operation aliases and functions
# -----------------------------------------------------------------------------
# START_OF_USAGE
# Utility: Short aliases for everyday file system commands
#
# Main Commands:
#   lr, la, l1            : ls variants
#   lock, unlock, mkexe   : permission shortcuts
#   dname <path>          : directory containing <path>
#
# Examples:
#   bu run lr /tmp
#   bu run dname ./README.md
# END_OF_USAGE
# -----------------------------------------------------------------------------
import logging
from pathlib import Path

from bu.core import shell_alias

logger = logging.getLogger("bu.util.alias")

lr = shell_alias("ls -lrt")  # List files in long format, sorted by modification time
la = shell_alias("ls -a")  # List all files including hidden files
l1 = shell_alias("ls -1")  # List files in single column
lock = shell_alias("chmod -R 700")  # Set restrictive permissions (700) on files/directories
unlock = shell_alias("chmod -R 755")  # Set standard permissions (755) on files/directories
mkexe = shell_alias("chmod -R 755")  # Make files executable with permission 755
fname = shell_alias("realpath")  # Get the full real path of a file/directory
h = shell_alias("head -20")  # Show first 20 lines of a file
t = shell_alias("tail -20")  # Show last 20 lines of a file
g = shell_alias("grep -i")  # Case-insensitive text search with grep


def dname(*args):  # Get the directory name of a file/directory
    if not args:
        logger.error("Usage: dname <path>")
        return 1
    print(Path(args[0]).resolve().parent)
    return 0
