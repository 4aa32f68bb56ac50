"""
Flag group models for the JIT compiler passes.

Each group is a plain aggregate of typed fields read by one compiler pass.
The FlagRegistry allocates one instance of each group with the defaults
below and owns it for the lifetime of the process.
"""

from typing import List
from pydantic import BaseModel, ConfigDict, Field

from .flag import INT32_MAX, INT32_MIN, INT64_MAX, INT64_MIN


class FlagGroup(BaseModel):
    """Base class for flag groups; assignments are type checked."""

    model_config = ConfigDict(validate_assignment=True)


class BuildXlaOpsPassFlags(FlagGroup):
    """Flags for the pass that lowers clusters into XLA launch ops."""
    tf_xla_enable_lazy_compilation: bool = True
    tf_xla_print_cluster_outputs: bool = False


class MarkForCompilationPassFlags(FlagGroup):
    """Flags for the auto-clustering pass."""
    tf_xla_auto_jit: int = Field(0, ge=INT32_MIN, le=INT32_MAX)
    tf_xla_min_cluster_size: int = Field(4, ge=INT32_MIN, le=INT32_MAX)
    tf_xla_max_cluster_size: int = Field(INT32_MAX, ge=INT32_MIN, le=INT32_MAX)
    tf_xla_clustering_debug: bool = False
    tf_xla_cpu_global_jit: bool = False
    tf_xla_clustering_fuel: int = Field(INT64_MAX, ge=INT64_MIN, le=INT64_MAX)
    tf_xla_disable_deadness_safety_checks_for_debugging: bool = False


class XlaDeviceFlags(FlagGroup):
    """Flags for XLA devices."""
    tf_xla_compile_on_demand: bool = False


class XlaOpsCommonFlags(FlagGroup):
    """Flags shared by the XLA launch ops."""
    tf_xla_always_defer_compilation: bool = False


class IntroduceFloatingPointJitterPassFlags(FlagGroup):
    """
    Flags for the floating point jitter pass.

    The amount defaults to a small nonzero value so the pass is present but
    inert until tensor_names is also set.
    """
    jitter_amount: float = 1e-5
    tensor_names: List[str] = Field(default_factory=list)
