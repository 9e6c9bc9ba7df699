"""`vstbundle list` — plugins in the manifest and where their bundles land."""

from __future__ import annotations

import sys
from pathlib import Path

from vstbundle.bundle import bundle_binary_path
from vstbundle.config import build_configs, load_manifest
from vstbundle.helpers import relative_or_absolute


def run_list(project_root: Path, manifest: Path | None = None) -> int:
    """Print one line per plugin. Returns 0, or 1 when the manifest is invalid or lists no plugins."""
    try:
        configs = build_configs(project_root, load_manifest(project_root, manifest))
    except ValueError as e:
        print(f"❌ {e}", file=sys.stderr)
        return 1
    if not configs:
        print("❌ No plugins in manifest", file=sys.stderr)
        return 1
    for c in configs:
        p = c.plugin
        dst = bundle_binary_path(p.source_root, p.bundle_name, c.platform_dir)
        print(f"{p.plugin_name}: {p.binary_name} -> {relative_or_absolute(dst, project_root)}")
    return 0


def run_list_argv(argv: list[str] | None = None) -> None:
    """Parse argv (unknown arguments are an error) and list plugins. Exits 0/1."""
    import argparse

    if argv is None:
        argv = sys.argv[2:]  # skip 'vstbundle list'
    ap = argparse.ArgumentParser(prog="vstbundle list", description="List manifest plugins")
    ap.add_argument(
        "--project-root",
        type=Path,
        default=Path.cwd(),
        help="Project root (default: cwd)",
    )
    ap.add_argument("--manifest", type=Path, default=None, help="Manifest (default: vstbundle.yaml)")
    args = ap.parse_args(argv)
    sys.exit(run_list(args.project_root.resolve(), args.manifest))
