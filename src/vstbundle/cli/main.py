"""Main CLI entry point for vstbundle."""

import sys

from vstbundle.cli import build as build_cli
from vstbundle.cli import list_cmd


def _tolerant_output() -> None:
    """Replace characters the console code page cannot encode (cp1252 pipes on Windows) instead of raising."""
    for stream in (sys.stdout, sys.stderr):
        reconfigure = getattr(stream, "reconfigure", None)
        if reconfigure is not None:
            reconfigure(errors="replace")


def main() -> None:
    """Main CLI entry point."""
    _tolerant_output()
    if len(sys.argv) < 2:
        print("Usage: vstbundle <command> [args...]", file=sys.stderr)
        print("Commands:", file=sys.stderr)
        print(
            "  build <plugin>...|--all   - cargo build, then bundle (xtask, manual fallback)",
            file=sys.stderr,
        )
        print(
            "  bundle <plugin>...|--all  - Bundle the last build without compiling",
            file=sys.stderr,
        )
        print(
            "  list                      - Plugins in vstbundle.yaml and their bundle paths",
            file=sys.stderr,
        )
        sys.exit(1)

    command = sys.argv[1]

    if command == "build":
        build_cli.run_build_argv()
    elif command == "bundle":
        build_cli.run_build_argv(skip_compile=True)
    elif command == "list":
        list_cmd.run_list_argv()
    else:
        print(f"Error: Unknown command: {command}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
