"""`vstbundle build` / `vstbundle bundle` — compile (or not) and bundle plugins from the manifest."""

import logging
import sys
from pathlib import Path

from vstbundle.config import build_configs, load_manifest
from vstbundle.pipeline import run_all


def run_build_argv(argv: list[str] | None = None, skip_compile: bool = False) -> None:
    """Parse argv and run the pipeline for the named plugins (or --all). Exits 0/1."""
    import argparse

    if argv is None:
        argv = sys.argv[2:] if len(sys.argv) > 2 else []  # skip 'vstbundle build'
    verb = "bundle" if skip_compile else "build"
    ap = argparse.ArgumentParser(
        prog=f"vstbundle {verb}",
        description="Bundle an existing build" if skip_compile else "Compile and bundle plugins",
    )
    ap.add_argument("plugins", nargs="*", help="Plugin names from the manifest")
    ap.add_argument("--all", action="store_true", help="Every plugin in the manifest")
    ap.add_argument(
        "--target",
        default=None,
        help="Target triple (default: manifest, else x86_64-pc-windows-msvc)",
    )
    ap.add_argument("--debug", action="store_true", help="Debug profile instead of release")
    ap.add_argument("--dry-run", action="store_true", help="Print what would run")
    ap.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    ap.add_argument(
        "--project-root",
        type=Path,
        default=Path.cwd(),
        help="Project root (default: cwd)",
    )
    ap.add_argument("--manifest", type=Path, default=None, help="Manifest (default: vstbundle.yaml)")
    args = ap.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    if not args.all and not args.plugins:
        print(f"❌ Name a plugin or pass --all (vstbundle {verb} <plugin>)", file=sys.stderr)
        sys.exit(1)

    project_root = args.project_root.resolve()
    try:
        configs = build_configs(
            project_root,
            load_manifest(project_root, args.manifest),
            names=None if args.all else args.plugins,
            triple=args.target,
            profile="debug" if args.debug else None,
            dry_run=args.dry_run,
        )
    except (KeyError, ValueError) as e:
        print(f"❌ {e.args[0] if e.args else e}", file=sys.stderr)
        sys.exit(1)
    if not configs:
        print("❌ No plugins in manifest", file=sys.stderr)
        sys.exit(1)
    sys.exit(run_all(configs, skip_compile=skip_compile))
