"""Pytest fixtures for vstbundle tests."""

from __future__ import annotations

from pathlib import Path

import pytest


@pytest.fixture
def plugin_root(tmp_path: Path) -> Path:
    """Empty crate directory tmp_path/hello_vst with a Cargo.toml."""
    root = tmp_path / "hello_vst"
    root.mkdir()
    (root / "Cargo.toml").write_text('[package]\nname = "hello_vst"\n')
    return root


@pytest.fixture
def make_config(plugin_root: Path):
    """Factory for a HelloVst PipelineConfig targeting x86_64-pc-windows-msvc (no env script)."""
    from vstbundle.config import (
        BuildTarget,
        PipelineConfig,
        PluginDescriptor,
        Profile,
        ToolchainConfig,
    )

    def _make(
        env_script: Path | None = None,
        profile: Profile = Profile.RELEASE,
        dry_run: bool = False,
    ) -> PipelineConfig:
        return PipelineConfig(
            plugin=PluginDescriptor(
                plugin_name="HelloVst",
                binary_name="hello_vst.dll",
                bundle_name="HelloVst",
                source_root=plugin_root,
                package="hello_vst",
            ),
            target=BuildTarget("x86_64-pc-windows-msvc", profile),
            toolchain=ToolchainConfig(
                cargo_bin=plugin_root.parent / ".cargo" / "bin",
                env_script=env_script,
            ),
            platform_dir="x86_64-win",
            dry_run=dry_run,
        )

    return _make


@pytest.fixture
def bare_env() -> dict[str, str]:
    """Environment with an empty PATH so cargo never resolves from the host."""
    return {"PATH": ""}
