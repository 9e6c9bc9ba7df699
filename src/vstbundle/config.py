"""Pipeline configuration: build target, plugin identity, toolchain, manifest loading.

The manifest (vstbundle.yaml at the project root) looks like::

    toolchain:
      cargo_bin: ~/.cargo/bin
      env_script: C:/Program Files (x86)/.../vcvars64.bat
    target:
      triple: x86_64-pc-windows-msvc
      profile: release
    plugins:
      - name: HelloVst
        source_root: hello_vst
        binary_name: hello_vst.dll   # optional, derived from the package
        bundle_name: HelloVst        # optional, defaults to name

All paths are relative to project_root.
"""

from __future__ import annotations

import os
import sys
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

from vstbundle.helpers import (
    DEFAULT_TRIPLE,
    cdylib_filename,
    load_yaml_manifest,
    platform_dir_for_triple,
)

MANIFEST_NAME = "vstbundle.yaml"

ENV_SCRIPT_VAR = "VSTBUNDLE_ENV_SCRIPT"

# Visual Studio 2022 Build Tools; override with VSTBUNDLE_ENV_SCRIPT or toolchain.env_script.
VCVARS64_DEFAULT = (
    r"C:\Program Files (x86)\Microsoft Visual Studio\2022\BuildTools"
    r"\VC\Auxiliary\Build\vcvars64.bat"
)

DEFAULT_TARGET: dict[str, str] = {
    "triple": DEFAULT_TRIPLE,
    "profile": "release",
    "platform_dir": "",
}


class Profile(str, Enum):
    RELEASE = "release"
    DEBUG = "debug"


@dataclass(frozen=True)
class BuildTarget:
    """Target triple plus cargo profile."""

    triple: str = DEFAULT_TRIPLE
    profile: Profile = Profile.RELEASE

    @property
    def profile_dir(self) -> str:
        """Directory cargo writes this profile's output to under target/<triple>/."""
        return self.profile.value

    def cargo_profile_args(self) -> list[str]:
        return ["--release"] if self.profile is Profile.RELEASE else []


@dataclass(frozen=True)
class PluginDescriptor:
    """One plugin: display name, compiled binary filename, bundle name, and where its crate lives."""

    plugin_name: str
    binary_name: str
    bundle_name: str
    source_root: Path
    package: str

    def compiled_binary(self, target: BuildTarget) -> Path:
        return self.source_root / "target" / target.triple / target.profile_dir / self.binary_name


@dataclass(frozen=True)
class ToolchainConfig:
    """Where cargo lives and which script initializes the native compiler environment (None: skip)."""

    cargo_bin: Path
    env_script: Path | None = None


@dataclass(frozen=True)
class PipelineConfig:
    plugin: PluginDescriptor
    target: BuildTarget
    toolchain: ToolchainConfig
    platform_dir: str
    dry_run: bool = False


def _require_mapping(value: Any, what: str) -> Mapping[str, Any]:
    """None -> {}; a mapping passes through; anything else raises ValueError."""
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        msg = f"{what} must be a mapping: {value!r}"
        raise ValueError(msg)
    return value


def resolve_target_section(section: Mapping[str, Any] | None) -> dict[str, str]:
    """Return target dict with defaults filled. Unknown keys are ignored."""
    section = _require_mapping(section, "target")
    out = dict(DEFAULT_TARGET)
    if section:
        out.update({k: str(v) for k, v in section.items() if k in out and v is not None})
    return out


def parse_profile(value: str) -> Profile:
    """release|debug -> Profile. Raises ValueError otherwise."""
    try:
        return Profile(value.lower())
    except ValueError:
        msg = f"Unknown build profile: {value} (use release or debug)"
        raise ValueError(msg) from None


def default_cargo_bin(environ: Mapping[str, str] | None = None) -> Path:
    """$CARGO_HOME/bin when set, else ~/.cargo/bin."""
    env = os.environ if environ is None else environ
    cargo_home = env.get("CARGO_HOME")
    if cargo_home:
        return Path(cargo_home) / "bin"
    return Path.home() / ".cargo" / "bin"


def default_env_script(
    environ: Mapping[str, str] | None = None,
    platform: str | None = None,
) -> Path | None:
    """VSTBUNDLE_ENV_SCRIPT when set, else vcvars64.bat on Windows hosts, else None."""
    env = os.environ if environ is None else environ
    explicit = env.get(ENV_SCRIPT_VAR)
    if explicit:
        return Path(explicit)
    if (platform or sys.platform) == "win32":
        return Path(VCVARS64_DEFAULT)
    return None


def resolve_toolchain(
    section: Mapping[str, Any] | None,
    project_root: Path,
    environ: Mapping[str, str] | None = None,
    platform: str | None = None,
) -> ToolchainConfig:
    """Manifest values win over environment defaults. `env_script: null` disables the initializer."""
    section = _require_mapping(section, "toolchain")
    cargo_bin = default_cargo_bin(environ)
    if section.get("cargo_bin"):
        cargo_bin = _resolve_path(str(section["cargo_bin"]), project_root)
    if "env_script" in section:
        raw = section["env_script"]
        env_script = _resolve_path(str(raw), project_root) if raw else None
    else:
        env_script = default_env_script(environ, platform)
    return ToolchainConfig(cargo_bin=cargo_bin, env_script=env_script)


def descriptor_from_mapping(
    data: Mapping[str, Any],
    project_root: Path,
    target: BuildTarget,
) -> PluginDescriptor:
    """Build a PluginDescriptor from one manifest plugin entry, deriving names the way cargo does."""
    data = _require_mapping(data, "plugin entry")
    name = data.get("name")
    if not name:
        msg = f"Plugin entry missing name: {dict(data)}"
        raise ValueError(msg)
    name = str(name)
    source_root = _resolve_path(str(data.get("source_root") or name), project_root)
    package = str(data.get("package") or source_root.name)
    binary_name = str(data.get("binary_name") or cdylib_filename(package, target.triple))
    bundle_name = str(data.get("bundle_name") or name)
    return PluginDescriptor(
        plugin_name=name,
        binary_name=binary_name,
        bundle_name=bundle_name,
        source_root=source_root,
        package=package,
    )


def load_manifest(project_root: Path, manifest: Path | None = None) -> dict[str, Any]:
    """Load project_root/vstbundle.yaml (or manifest). Missing file -> {}."""
    path = manifest if manifest is not None else project_root / MANIFEST_NAME
    return load_yaml_manifest(path)


def plugin_entries(manifest: Mapping[str, Any]) -> list[Mapping[str, Any]]:
    entries = manifest.get("plugins") or []
    if not isinstance(entries, list):
        msg = "plugins must be a list"
        raise ValueError(msg)
    return entries


def build_configs(
    project_root: Path,
    manifest: Mapping[str, Any],
    names: list[str] | None = None,
    triple: str | None = None,
    profile: str | None = None,
    dry_run: bool = False,
    environ: Mapping[str, str] | None = None,
) -> list[PipelineConfig]:
    """PipelineConfig per plugin (all, or those named, in the order given).

    Raises KeyError for a name not in the manifest, ValueError for bad entries
    or a triple without a platform directory.
    """
    target_section = resolve_target_section(manifest.get("target"))
    if triple and triple != target_section["triple"]:
        # A manifest platform_dir belongs to the manifest triple.
        target_section["triple"] = triple
        target_section["platform_dir"] = ""
    if profile:
        target_section["profile"] = profile
    target = BuildTarget(
        triple=target_section["triple"],
        profile=parse_profile(target_section["profile"]),
    )
    platform_dir = target_section["platform_dir"] or platform_dir_for_triple(target.triple)
    toolchain = resolve_toolchain(manifest.get("toolchain"), project_root, environ)

    descriptors = [descriptor_from_mapping(e, project_root, target) for e in plugin_entries(manifest)]
    if names is not None:
        by_name = {d.plugin_name: d for d in descriptors}
        missing = [n for n in names if n not in by_name]
        if missing:
            raise KeyError(f"Plugin(s) not in manifest: {', '.join(missing)}")
        descriptors = [by_name[n] for n in names]

    return [
        PipelineConfig(
            plugin=d,
            target=target,
            toolchain=toolchain,
            platform_dir=platform_dir,
            dry_run=dry_run,
        )
        for d in descriptors
    ]


def _resolve_path(raw: str, project_root: Path) -> Path:
    p = Path(raw).expanduser()
    return p if p.is_absolute() else project_root / p
