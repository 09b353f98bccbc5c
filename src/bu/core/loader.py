"""
Utility loader - discovers utility files and imports them.

Utilities are single files named ``<prefix><name><suffix>`` (by default
``util_<name>.py``) living in one of the configured module directories.
Directories are searched in priority order; when the same name appears in
several directories the first one wins.
"""

from __future__ import annotations

import logging
import sys
from importlib.util import module_from_spec, spec_from_file_location
from pathlib import Path
from types import ModuleType

from bu.core.exceptions import UtilityImportError

logger = logging.getLogger(__name__)

DEFAULT_PREFIX = "util_"
DEFAULT_SUFFIX = ".py"

# Module name prefix for sys.modules
MODULE_PREFIX = "bu_util"


def util_name(path: Path, prefix: str = DEFAULT_PREFIX, suffix: str = DEFAULT_SUFFIX) -> str:
    """Derive a utility name from its file path.

    Example:
        util_name(Path("/x/util_git.py")) -> "git"
    """
    base = path.name
    if prefix and base.startswith(prefix):
        base = base[len(prefix):]
    if suffix and base.endswith(suffix):
        base = base[: -len(suffix)]
    return base


def util_filename(name: str, prefix: str = DEFAULT_PREFIX, suffix: str = DEFAULT_SUFFIX) -> str:
    return f"{prefix}{name}{suffix}"


def discover_utils(
    dirs: list[Path],
    prefix: str = DEFAULT_PREFIX,
    suffix: str = DEFAULT_SUFFIX,
) -> dict[str, Path]:
    """
    Discover utility files across directories.

    Args:
        dirs: Directories in priority order
        prefix: File name prefix
        suffix: File name suffix

    Returns:
        Mapping of utility name to source path, first occurrence winning.
    """
    found: dict[str, Path] = {}
    for util_dir in dirs:
        if not util_dir.exists():
            continue
        if not util_dir.is_dir():
            logger.warning(f"Utilities path is not a directory: {util_dir}")
            continue

        for path in sorted(util_dir.glob(f"{prefix}*{suffix}")):
            if not path.is_file():
                continue
            name = util_name(path, prefix, suffix)
            if not name or name in found:
                continue
            found[name] = path

    return found


def resolve_util(
    name: str,
    dirs: list[Path],
    prefix: str = DEFAULT_PREFIX,
    suffix: str = DEFAULT_SUFFIX,
) -> Path:
    """
    Resolve a utility name to its source path.

    Returns the first existing candidate. When none exists, the candidate in
    the first directory is returned so callers can report where it was
    expected.
    """
    filename = util_filename(name, prefix, suffix)
    for util_dir in dirs:
        candidate = util_dir / filename
        if candidate.is_file():
            return candidate
    if dirs:
        return dirs[0] / filename
    return Path(filename)


def import_util(name: str, path: Path) -> ModuleType:
    """
    Execute a utility file as a Python module.

    The module is (re)registered in sys.modules under ``bu_util.<name>`` so a
    second import replaces the first.

    Raises:
        UtilityImportError: if the file cannot be executed.
    """
    module_name = f"{MODULE_PREFIX}.{name}"

    try:
        spec = spec_from_file_location(module_name, path)
        if spec is None or spec.loader is None:
            raise UtilityImportError(f"Could not create module spec for {path}")

        module = module_from_spec(spec)
        sys.modules[module_name] = module
        spec.loader.exec_module(module)
        return module

    except UtilityImportError:
        sys.modules.pop(module_name, None)
        raise
    except SyntaxError as e:
        sys.modules.pop(module_name, None)
        raise UtilityImportError(f"Syntax error in {path}: {e}") from e
    except ImportError as e:
        sys.modules.pop(module_name, None)
        raise UtilityImportError(f"Import error in {path}: {e}") from e
    except Exception as e:
        sys.modules.pop(module_name, None)
        raise UtilityImportError(f"Error loading {path}: {e}") from e


def forget_util(name: str) -> None:
    """Drop an imported utility from sys.modules."""
    sys.modules.pop(f"{MODULE_PREFIX}.{name}", None)
