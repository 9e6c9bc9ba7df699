"""VST3 bundling: packaging helper first, manual tree assembly as the fallback."""

from .helper import run_packaging_helper, xtask_bundle_command
from .manual import (
    bundle_binary_path,
    bundle_dir,
    bundled_root,
    ensure_bundle_tree,
    manual_bundle,
)

__all__ = [
    "bundle_binary_path",
    "bundle_dir",
    "bundled_root",
    "ensure_bundle_tree",
    "manual_bundle",
    "run_packaging_helper",
    "xtask_bundle_command",
]
