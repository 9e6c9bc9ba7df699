"""Bundle with the workspace packaging helper (nih-plug xtask): cargo xtask bundle <package>."""

from __future__ import annotations

import subprocess
from collections.abc import Mapping

from vstbundle.config import BuildTarget, PluginDescriptor
from vstbundle.errors import PackagingHelperFailed


def xtask_bundle_command(plugin: PluginDescriptor, target: BuildTarget) -> list[str]:
    return [
        "cargo",
        "xtask",
        "bundle",
        plugin.package,
        *target.cargo_profile_args(),
        "--target",
        target.triple,
    ]


def run_packaging_helper(
    plugin: PluginDescriptor,
    target: BuildTarget,
    env: Mapping[str, str],
) -> None:
    """Run the helper. Exit status is the only success signal; the bundle contents are not inspected.

    Raises PackagingHelperFailed on non-zero exit or when it cannot be launched.
    """
    cmd = xtask_bundle_command(plugin, target)
    try:
        r = subprocess.run(cmd, cwd=str(plugin.source_root), env=dict(env))
    except OSError as e:
        raise PackagingHelperFailed(f"could not run cargo xtask: {e}") from e
    if r.returncode != 0:
        raise PackagingHelperFailed(f"cargo xtask bundle exited with status {r.returncode}")
