"""Build nih-plug audio plugins with cargo and assemble their VST3 bundles."""

from vstbundle.config import (
    BuildTarget,
    PipelineConfig,
    PluginDescriptor,
    Profile,
    ToolchainConfig,
)
from vstbundle.errors import (
    BuildFailed,
    ManualBundleFailed,
    PackagingHelperFailed,
    PipelineError,
    ToolchainMissing,
)
from vstbundle.pipeline import PipelineResult, Stage, run_all, run_pipeline

__all__ = [
    "BuildFailed",
    "BuildTarget",
    "ManualBundleFailed",
    "PackagingHelperFailed",
    "PipelineConfig",
    "PipelineError",
    "PipelineResult",
    "PluginDescriptor",
    "Profile",
    "Stage",
    "ToolchainConfig",
    "ToolchainMissing",
    "run_all",
    "run_pipeline",
]

__version__ = "0.1.0"
