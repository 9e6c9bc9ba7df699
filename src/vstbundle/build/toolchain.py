"""Prepare the build environment: cargo on PATH plus the native compiler variables.

Returns a new environment mapping for the later stages; os.environ is left untouched
so repeated pipeline runs in one process do not accumulate PATH entries.
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
from collections.abc import Mapping
from pathlib import Path

from vstbundle.config import ToolchainConfig
from vstbundle.errors import ToolchainMissing

log = logging.getLogger(__name__)


def _path_entries(path_value: str) -> list[str]:
    return [p for p in path_value.split(os.pathsep) if p]


def with_cargo_on_path(env: dict[str, str], cargo_bin: Path) -> dict[str, str]:
    """Prepend cargo_bin to PATH unless cargo already resolves or the dir is already listed."""
    current = env.get("PATH", "")
    if shutil.which("cargo", path=current):
        return env
    entries = _path_entries(current)
    if str(cargo_bin) in entries:
        return env
    log.debug("Prepending %s to PATH", cargo_bin)
    out = dict(env)
    out["PATH"] = os.pathsep.join([str(cargo_bin), *entries])
    return out


def env_script_command(script: Path) -> list[str]:
    """Shell command that runs script then dumps the resulting environment as KEY=VALUE lines."""
    if script.suffix.lower() in (".bat", ".cmd"):
        return ["cmd", "/d", "/s", "/c", f'call "{script}" >nul && set']
    return ["sh", "-c", f'. "{script}" >/dev/null && env']


def parse_env_dump(text: str) -> dict[str, str]:
    """Parse `set`/`env` output. Lines without '=' (continuations, banners) are skipped."""
    out: dict[str, str] = {}
    for line in text.splitlines():
        key, sep, value = line.partition("=")
        if not sep or not key or key.startswith(" "):
            continue
        out[key] = value
    return out


def run_env_script(script: Path, env: Mapping[str, str]) -> dict[str, str]:
    """Run the compiler-environment initializer and return the variables it leaves set.

    Raises ToolchainMissing when the script exits non-zero or the shell cannot be started.
    """
    cmd = env_script_command(script)
    log.debug("Initializing compiler environment: %s", " ".join(cmd))
    args: list[str] | str = cmd
    if cmd[0] == "cmd":
        # cmd /s strips the outer quotes; list2cmdline would escape the inner ones.
        args = " ".join(cmd[:-1]) + f' "{cmd[-1]}"'
    try:
        r = subprocess.run(args, env=dict(env), capture_output=True, text=True)
    except OSError as e:
        raise ToolchainMissing(f"could not run {script}: {e}") from e
    if r.returncode != 0:
        detail = (r.stderr or r.stdout or "").strip()
        msg = f"{script} exited with status {r.returncode}"
        raise ToolchainMissing(f"{msg}: {detail}" if detail else msg)
    return parse_env_dump(r.stdout)


def prepare_environment(
    toolchain: ToolchainConfig,
    base_env: Mapping[str, str] | None = None,
) -> dict[str, str]:
    """Environment for compile and bundle stages. Raises ToolchainMissing on initializer failure."""
    env = dict(os.environ if base_env is None else base_env)
    env = with_cargo_on_path(env, toolchain.cargo_bin)
    if toolchain.env_script is None:
        return env
    # The dump is the whole environment the script left; variables it unset stay unset.
    dumped = run_env_script(toolchain.env_script, env)
    return with_cargo_on_path(dumped, toolchain.cargo_bin)
