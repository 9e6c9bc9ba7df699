"""Assemble the VST3 bundle tree by hand and copy the compiled binary into it.

Layout, relative to <source_root>/target/bundled/:

    <bundle>.vst3/Contents/<platform_dir>/<bundle>.vst3

Directory creation is idempotent. The copy overwrites any previous bundle binary
(last successful build wins) and goes through a sibling temp file, so a failed copy
never leaves a truncated binary at the destination.
"""

from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path

from vstbundle.errors import ManualBundleFailed

log = logging.getLogger(__name__)

BUNDLED_DIR = "bundled"
BUNDLE_SUFFIX = ".vst3"


def bundled_root(source_root: Path) -> Path:
    return source_root / "target" / BUNDLED_DIR


def bundle_dir(source_root: Path, bundle_name: str) -> Path:
    return bundled_root(source_root) / f"{bundle_name}{BUNDLE_SUFFIX}"


def bundle_binary_path(source_root: Path, bundle_name: str, platform_dir: str) -> Path:
    """Where the host expects the plugin binary inside the bundle."""
    return (
        bundle_dir(source_root, bundle_name)
        / "Contents"
        / platform_dir
        / f"{bundle_name}{BUNDLE_SUFFIX}"
    )


def ensure_bundle_tree(source_root: Path, bundle_name: str, platform_dir: str) -> Path:
    """Create target/bundled/<bundle>.vst3/Contents/<platform_dir>/ one level at a time. Returns the leaf."""
    levels = [
        bundled_root(source_root),
        bundle_dir(source_root, bundle_name),
        bundle_dir(source_root, bundle_name) / "Contents",
        bundle_dir(source_root, bundle_name) / "Contents" / platform_dir,
    ]
    levels[0].mkdir(parents=True, exist_ok=True)
    for d in levels[1:]:
        d.mkdir(exist_ok=True)
    return levels[-1]


def _copy_replace(src: Path, dst: Path) -> None:
    tmp = dst.with_name(f".{dst.name}.tmp")
    try:
        shutil.copyfile(src, tmp)
        os.replace(tmp, dst)
    except OSError:
        tmp.unlink(missing_ok=True)
        raise


def manual_bundle(
    binary: Path,
    source_root: Path,
    bundle_name: str,
    platform_dir: str,
) -> Path:
    """Build the bundle tree and copy binary into place. Returns the bundled binary path.

    Raises ManualBundleFailed when a directory cannot be created or the copy fails.
    """
    dst = bundle_binary_path(source_root, bundle_name, platform_dir)
    try:
        ensure_bundle_tree(source_root, bundle_name, platform_dir)
    except OSError as e:
        raise ManualBundleFailed(f"could not create {dst.parent}: {e}") from e
    if not binary.is_file():
        # Still attempt the copy so the failure reports the OS error.
        log.warning("Compiled binary not found at %s", binary)
    try:
        _copy_replace(binary, dst)
    except OSError as e:
        raise ManualBundleFailed(f"could not copy {binary} -> {dst}: {e}") from e
    return dst
