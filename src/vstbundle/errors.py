"""Pipeline failures. Each error names the stage that raised it."""

from __future__ import annotations


class PipelineError(Exception):
    """Base class for stage failures. `stage` is a pipeline Stage value."""

    stage = ""
    label = "pipeline failed"

    def __init__(self, cause: str) -> None:
        super().__init__(cause)
        self.cause = cause

    def __str__(self) -> str:
        return f"{self.label}: {self.cause}"


class ToolchainMissing(PipelineError):
    """Compiler environment could not be initialized. Fatal."""

    stage = "prepare_env"
    label = "toolchain not found"


class BuildFailed(PipelineError):
    """cargo build exited non-zero. Fatal."""

    stage = "compile"
    label = "build failed"


class PackagingHelperFailed(PipelineError):
    """Packaging helper exited non-zero or could not be launched. Recovered by manual bundling."""

    stage = "bundle"
    label = "packaging helper failed"


class ManualBundleFailed(PipelineError):
    """Bundle tree could not be created or the binary could not be copied. Fatal."""

    stage = "manual_bundle"
    label = "manual bundle failed"
