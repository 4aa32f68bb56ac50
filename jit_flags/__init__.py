"""
JIT compiler flags package with lazy, thread-safe initialization.

This package provides the flag groups read by the JIT compiler passes:
- Typed defaults for every flag group
- Overrides from a single environment variable (TF_XLA_FLAGS)
- Exactly-once initialization across threads
- Fatal errors for unknown flags or malformed values
- An extension hook for appending more flag descriptors

Basic usage:
    ```python
    from jit_flags import FlagRegistry

    # Build once at startup and pass it to the passes that need it
    registry = FlagRegistry()

    clustering = registry.get_mark_for_compilation_pass_flags()
    if clustering.tf_xla_clustering_debug:
        print("Dumping clustering graphs")

    jitter = registry.get_introduce_floating_point_jitter_pass_flags()
    for tensor in jitter.tensor_names:
        print(f"Adding {jitter.jitter_amount} to {tensor}")
    ```

Shell usage:
    TF_XLA_FLAGS="tf_xla_min_cluster_size=10,tf_xla_clustering_debug=true" python my_app.py
"""

# Core classes
from .flag import Flag, FlagKind, FlagParseError, UnknownFlagError, FlagValueError
from .flag_table import FlagTable
from .flag_groups import (
    FlagGroup,
    BuildXlaOpsPassFlags,
    MarkForCompilationPassFlags,
    XlaDeviceFlags,
    XlaOpsCommonFlags,
    IntroduceFloatingPointJitterPassFlags,
)
from .config import FlagsConfig, get_flags_config, reset_flags_config
from .registry import (
    FlagRegistry,
    get_registry,
    reset_registry,
    get_build_xla_ops_pass_flags,
    get_mark_for_compilation_pass_flags,
    get_xla_device_flags,
    get_xla_ops_common_flags,
    get_introduce_floating_point_jitter_pass_flags,
    append_mark_for_compilation_pass_flags,
)

# Public API
__all__ = [
    # Descriptors
    'Flag',
    'FlagKind',
    'FlagTable',

    # Errors
    'FlagParseError',
    'UnknownFlagError',
    'FlagValueError',

    # Flag groups
    'FlagGroup',
    'BuildXlaOpsPassFlags',
    'MarkForCompilationPassFlags',
    'XlaDeviceFlags',
    'XlaOpsCommonFlags',
    'IntroduceFloatingPointJitterPassFlags',

    # Registry
    'FlagRegistry',
    'get_registry',
    'reset_registry',
    'get_build_xla_ops_pass_flags',
    'get_mark_for_compilation_pass_flags',
    'get_xla_device_flags',
    'get_xla_ops_common_flags',
    'get_introduce_floating_point_jitter_pass_flags',
    'append_mark_for_compilation_pass_flags',

    # Configuration
    'FlagsConfig',
    'get_flags_config',
    'reset_flags_config',
]

# Version info
__version__ = "1.0.0"
__description__ = "Lazily initialized JIT compiler flags with environment overrides"
