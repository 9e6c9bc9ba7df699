"""Compile a plugin crate: cargo build [--release] --target <triple> in the plugin's source root."""

from __future__ import annotations

import subprocess
from collections.abc import Mapping
from pathlib import Path

from vstbundle.config import BuildTarget, PluginDescriptor
from vstbundle.errors import BuildFailed


def cargo_build_command(plugin: PluginDescriptor, target: BuildTarget) -> list[str]:
    cmd = ["cargo", "build", *target.cargo_profile_args(), "--target", target.triple]
    # Workspace member whose package name differs from its directory.
    if plugin.package != plugin.source_root.name:
        cmd += ["-p", plugin.package]
    return cmd


def compile_plugin(
    plugin: PluginDescriptor,
    target: BuildTarget,
    env: Mapping[str, str],
) -> Path:
    """Run cargo build and return the compiled binary path. Raises BuildFailed on non-zero exit."""
    if not plugin.source_root.is_dir():
        raise BuildFailed(f"source root not found: {plugin.source_root}")
    cmd = cargo_build_command(plugin, target)
    try:
        r = subprocess.run(cmd, cwd=str(plugin.source_root), env=dict(env))
    except OSError as e:
        raise BuildFailed(f"could not run cargo: {e}") from e
    if r.returncode != 0:
        raise BuildFailed(f"cargo build exited with status {r.returncode}")
    return plugin.compiled_binary(target)
