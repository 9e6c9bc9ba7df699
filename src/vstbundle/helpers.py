"""Shared helpers for vstbundle (naming, target triples, manifest loading).

Used by config, build, bundle and the CLI.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

# --- Target triples ---

# VST3 bundle platform directories (Contents/<dir>/) per cargo target triple.
TRIPLE_PLATFORM_DIRS: dict[str, str] = {
    "x86_64-pc-windows-msvc": "x86_64-win",
    "x86_64-pc-windows-gnu": "x86_64-win",
    "i686-pc-windows-msvc": "x86-win",
    "aarch64-pc-windows-msvc": "arm64-win",
}

DEFAULT_TRIPLE = "x86_64-pc-windows-msvc"


def platform_dir_for_triple(triple: str) -> str:
    """Return the bundle platform dir for triple. Raises ValueError for triples without a mapping."""
    try:
        return TRIPLE_PLATFORM_DIRS[triple]
    except KeyError:
        msg = f"No VST3 platform directory known for target {triple}; set platform_dir explicitly"
        raise ValueError(msg) from None


def is_windows_triple(triple: str) -> bool:
    return "-windows-" in triple


# --- Naming ---


def crate_lib_name(package: str) -> str:
    """Cargo library name for a package: dashes become underscores, case kept."""
    return package.replace("-", "_")


def cdylib_filename(package: str, triple: str) -> str:
    """Filename cargo emits for a cdylib package on triple (e.g. hello_vst -> hello_vst.dll)."""
    lib = crate_lib_name(package)
    if is_windows_triple(triple):
        return f"{lib}.dll"
    if "-apple-" in triple:
        return f"lib{lib}.dylib"
    return f"lib{lib}.so"


# --- Manifest / file ---


def load_yaml_manifest(p: Path) -> dict[str, Any]:
    """Load a YAML manifest. Missing or empty file -> {}. Raises ValueError if the top level is not a mapping."""
    if not p.is_file():
        return {}
    with p.open() as f:
        data = yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        msg = f"Manifest must be a mapping: {p}"
        raise ValueError(msg)
    return data


def relative_or_absolute(path: Path, root: Path) -> Path:
    """path relative to root when it lives under root, else path unchanged (for display)."""
    try:
        return path.relative_to(root)
    except ValueError:
        return path
