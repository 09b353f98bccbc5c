#!/usr/bin/env python3
"""
CLI entry point for initializing bu (bu-init command).
"""

from __future__ import annotations

import argparse
import shutil
from pathlib import Path


def _install_builtins(utils_dir: Path, force: bool = False) -> list[str]:
    """Install package builtin utilities as symlinks in the user directory.

    Users can remove a symlink to hide a builtin, or replace it with their
    own file of the same name.

    Args:
        utils_dir: User utilities directory (~/.bu/utils)
        force: Replace existing files/symlinks

    Returns:
        List of installed links
    """
    from bu.config import PACKAGE_UTILS_DIR
    from bu.core.loader import DEFAULT_PREFIX, DEFAULT_SUFFIX

    installed = []
    if not PACKAGE_UTILS_DIR.exists():
        return installed

    for source in sorted(PACKAGE_UTILS_DIR.glob(f"{DEFAULT_PREFIX}*{DEFAULT_SUFFIX}")):
        target = utils_dir / source.name
        if target.exists() or target.is_symlink():
            if not force:
                continue  # Don't overwrite existing user customizations
            if target.is_dir() and not target.is_symlink():
                shutil.rmtree(target)
            else:
                target.unlink()
        target.symlink_to(source)
        installed.append(f"{target} -> {source}")

    return installed


def _install_completions(base_dir: Path) -> list[str]:
    """Write bash and zsh completion scripts to ~/.bu/completions/."""
    from bu.cli.completion import BASH_COMPLETION, ZSH_COMPLETION

    completions_dir = base_dir / "completions"
    completions_dir.mkdir(parents=True, exist_ok=True)

    installed = []
    for filename, script in (("bu.bash", BASH_COMPLETION), ("bu.zsh", ZSH_COMPLETION)):
        path = completions_dir / filename
        path.write_text(script)
        installed.append(str(path))
    return installed


def initialize(force: bool = False) -> tuple[list[str], list[str]]:
    """Create the bu home directory layout.

    Returns:
        (created, skipped) path descriptions
    """
    from bu.config import get_config_manager

    cfg_mgr = get_config_manager()
    base_dir = cfg_mgr.CONFIG_DIR
    utils_dir = base_dir / "utils"
    config_file = cfg_mgr.CONFIG_FILE

    created = []
    skipped = []

    for dir_path in [base_dir, utils_dir]:
        if not dir_path.exists():
            dir_path.mkdir(parents=True, exist_ok=True)
            created.append(str(dir_path))
        else:
            skipped.append(str(dir_path))

    existed = config_file.exists()
    if force and existed:
        backup = config_file.parent / "config-backup.json"
        shutil.copy2(config_file, backup)
        created.append(f"{backup} (backup)")
        cfg_mgr._create_default_config()
        created.append(f"{config_file} (replaced)")
    elif not existed:
        cfg_mgr.load(create_if_missing=True)
        created.append(str(config_file))
    else:
        skipped.append(str(config_file))

    created.extend(_install_builtins(utils_dir, force=force))
    created.extend(_install_completions(base_dir))
    return created, skipped


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the bu-init CLI."""
    parser = argparse.ArgumentParser(
        prog="bu-init",
        description="Initialize bu configuration and directories",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
This command creates:
  ~/.bu/                  - Main configuration directory
  ~/.bu/config.json       - Configuration file with default settings
  ~/.bu/utils/            - Directory for utilities (with builtins linked)
  ~/.bu/completions/      - Shell completion scripts (bash/zsh)

Examples:
    bu-init                 # Initialize with defaults
    bu-init --force         # Replace existing config and builtin links
        """,
    )
    parser.add_argument(
        "--force", "-f",
        action="store_true",
        help="Replace existing configuration and builtin links"
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Suppress output"
    )
    args = parser.parse_args(argv)

    created, skipped = initialize(force=args.force)

    if not args.quiet:
        if created:
            print("Created:")
            for path in created:
                print(f"  {path}")

        if skipped:
            print("\nAlready exists (skipped):")
            for path in skipped:
                print(f"  {path}")

        print("\nInitialization complete!")
        print("\nNext steps:")
        print("  1. List utilities:   bu list")
        print("  2. Load one:         bu load git")
        print("  3. Start a session:  bu shell")
        print("\nEnable shell completion:")
        print("  bash: source ~/.bu/completions/bu.bash")
        print("  zsh:  source ~/.bu/completions/bu.zsh")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
