"""Environment preparation and cargo compilation for plugin crates."""

from .compile import cargo_build_command, compile_plugin
from .toolchain import (
    env_script_command,
    prepare_environment,
    run_env_script,
    with_cargo_on_path,
)

__all__ = [
    "cargo_build_command",
    "compile_plugin",
    "env_script_command",
    "prepare_environment",
    "run_env_script",
    "with_cargo_on_path",
]
