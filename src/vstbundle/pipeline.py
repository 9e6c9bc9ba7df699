"""Build-and-bundle pipeline for one plugin.

    prepare_env -> compile -> bundle --(helper failed)--> manual_bundle -> done

ToolchainMissing, BuildFailed and ManualBundleFailed end the run; PackagingHelperFailed
switches to manual bundling. Stages block on their subprocess; there are no timeouts.
Runs against the same target/ directory are not locked: callers must serialize them.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from vstbundle.build import (
    cargo_build_command,
    compile_plugin,
    env_script_command,
    prepare_environment,
)
from vstbundle.bundle import (
    bundle_binary_path,
    manual_bundle,
    run_packaging_helper,
    xtask_bundle_command,
)
from vstbundle.config import PipelineConfig
from vstbundle.errors import PackagingHelperFailed, PipelineError

log = logging.getLogger(__name__)


class Stage(str, Enum):
    PREPARE_ENV = "prepare_env"
    COMPILE = "compile"
    BUNDLE = "bundle"
    MANUAL_BUNDLE = "manual_bundle"
    DONE = "done"


@dataclass(frozen=True)
class PipelineResult:
    ok: bool
    stage: Stage
    message: str = ""
    bundle_path: Path | None = None
    used_fallback: bool = False

    @property
    def exit_code(self) -> int:
        return 0 if self.ok else 1


def _failed(err: PipelineError, used_fallback: bool = False) -> PipelineResult:
    print(f"❌ {err}", file=sys.stderr)
    return PipelineResult(
        ok=False,
        stage=Stage(err.stage),
        message=str(err),
        used_fallback=used_fallback,
    )


def _dry_run(config: PipelineConfig, skip_compile: bool = False) -> PipelineResult:
    plugin, target = config.plugin, config.target
    dst = bundle_binary_path(plugin.source_root, plugin.bundle_name, config.platform_dir)
    if config.toolchain.env_script is not None:
        print(f"[dry-run] would: {' '.join(env_script_command(config.toolchain.env_script))}")
    if not skip_compile:
        cmd = " ".join(cargo_build_command(plugin, target))
        print(f"[dry-run] would: {cmd} (in {plugin.source_root})")
    print(f"[dry-run] would: {' '.join(xtask_bundle_command(plugin, target))}")
    print(f"[dry-run] fallback: copy {plugin.compiled_binary(target)} -> {dst}")
    return PipelineResult(ok=True, stage=Stage.DONE, bundle_path=dst)


def _bundle(config: PipelineConfig, binary: Path, env: Mapping[str, str]) -> PipelineResult:
    """Packaging helper, then the manual fallback if the helper fails."""
    plugin, target = config.plugin, config.target
    dst = bundle_binary_path(plugin.source_root, plugin.bundle_name, config.platform_dir)
    try:
        run_packaging_helper(plugin, target, env)
    except PackagingHelperFailed as e:
        log.info("%s; falling back to manual bundle", e)
        print(f"⚠️  {e}; bundling manually", file=sys.stderr)
    else:
        print(f"✅ Bundled {plugin.bundle_name}.vst3 with cargo xtask")
        return PipelineResult(ok=True, stage=Stage.DONE, bundle_path=dst)

    try:
        dst = manual_bundle(binary, plugin.source_root, plugin.bundle_name, config.platform_dir)
    except PipelineError as e:
        return _failed(e, used_fallback=True)
    print(f"📦 Copied {binary.name} -> {dst}")
    print(f"✅ Bundled {plugin.bundle_name}.vst3 manually")
    return PipelineResult(ok=True, stage=Stage.DONE, bundle_path=dst, used_fallback=True)


def run_pipeline(
    config: PipelineConfig,
    base_env: Mapping[str, str] | None = None,
    skip_compile: bool = False,
) -> PipelineResult:
    """Compile and bundle one plugin. Never raises PipelineError; failures come back as results.

    skip_compile bundles whatever binary the last build left at the expected path.
    """
    if config.dry_run:
        return _dry_run(config, skip_compile)
    plugin, target = config.plugin, config.target
    print(f"🔨 {plugin.plugin_name}: {target.triple} ({target.profile_dir})")

    try:
        env = prepare_environment(config.toolchain, base_env)
    except PipelineError as e:
        return _failed(e)

    if skip_compile:
        binary = plugin.compiled_binary(target)
    else:
        try:
            binary = compile_plugin(plugin, target, env)
        except PipelineError as e:
            return _failed(e)

    return _bundle(config, binary, env)


def run_all(
    configs: Iterable[PipelineConfig],
    base_env: Mapping[str, str] | None = None,
    skip_compile: bool = False,
) -> int:
    """Run each plugin in turn (continuing past failures). Returns 0 if all succeeded, else 1."""
    failed: list[str] = []
    for config in configs:
        result = run_pipeline(config, base_env, skip_compile=skip_compile)
        if not result.ok:
            failed.append(config.plugin.plugin_name)
    if failed:
        print(f"❌ Failed: {', '.join(failed)}", file=sys.stderr)
        return 1
    return 0
