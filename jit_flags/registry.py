"""
Lazily initialized registry of JIT compiler flag groups.

The FlagRegistry owns one instance of every flag group. The first accessor
call, from any thread, allocates the groups with their defaults, builds the
FlagTable and parses the overrides environment variable; concurrent first
callers block until that finishes and every later call returns the same
objects without locking.
"""

import logging
import os
import sys
import threading
from typing import Iterable, List, Mapping, Optional, Union

from .config import DEFAULT_FLAGS_ENV_VAR, FlagsConfig, get_flags_config
from .flag import Flag, FlagKind
from .flag_groups import (
    BuildXlaOpsPassFlags,
    IntroduceFloatingPointJitterPassFlags,
    MarkForCompilationPassFlags,
    XlaDeviceFlags,
    XlaOpsCommonFlags,
)
from .flag_table import FlagTable
from .env_source import read_override_string


# Set up logger
logger = logging.getLogger(__name__)


def _terminate(message: str) -> None:
    """Log a fatal flag error and end the process."""
    logger.critical(message)
    if threading.current_thread() is not threading.main_thread():
        # SystemExit would only end this thread.
        sys.stderr.write(f"{message}\n")
        sys.stderr.flush()
        logging.shutdown()
        os._exit(1)
    raise SystemExit(message)


class FlagRegistry:
    """
    Process-wide owner of the JIT flag groups.

    Construct one at startup and pass it to the passes that need it, or use
    get_registry() for the shared default instance. Nothing is read from the
    environment until the first accessor call.

    Unknown flags or malformed values in the overrides are fatal: the
    process terminates with a diagnostic instead of running with a
    configuration it did not ask for.
    """

    def __init__(self, env_var: str = DEFAULT_FLAGS_ENV_VAR,
                 environ: Optional[Mapping[str, str]] = None):
        """
        Args:
            env_var: Environment variable holding the overrides
            environ: Mapping to read overrides from instead of os.environ
        """
        self.env_var = env_var
        self._environ = environ
        self._lock = threading.Lock()
        self._initialized = False
        self._failure: Optional[str] = None
        self._initialization_count = 0

        self._build_ops_flags: Optional[BuildXlaOpsPassFlags] = None
        self._mark_for_compilation_flags: Optional[MarkForCompilationPassFlags] = None
        self._device_flags: Optional[XlaDeviceFlags] = None
        self._ops_flags: Optional[XlaOpsCommonFlags] = None
        self._jitter_flags: Optional[IntroduceFloatingPointJitterPassFlags] = None
        self._flag_table: Optional[FlagTable] = None

    @classmethod
    def from_config(cls, config: FlagsConfig,
                    environ: Optional[Mapping[str, str]] = None) -> 'FlagRegistry':
        """Create a registry reading the variable named in ``config``."""
        return cls(config.flags_env_var, environ)

    def _ensure_initialized(self) -> None:
        if self._initialized:
            return
        with self._lock:
            if not self._initialized and self._failure is None:
                try:
                    self._allocate_and_parse()
                except (ValueError, OSError) as e:
                    self._failure = f"Invalid {self.env_var} value: {e}"
                except Exception as e:
                    self._failure = (f"Failed to initialize JIT flags from {self.env_var}: "
                                     f"{type(e).__name__}: {e}")
                else:
                    self._initialized = True
        if self._failure is not None:
            _terminate(self._failure)

    def _mark_for_compilation_flag_list(self) -> List[Flag]:
        flags = self._mark_for_compilation_flags
        return [
            Flag.bound("tf_xla_auto_jit", FlagKind.INT32, flags, "tf_xla_auto_jit",
                       "Control compilation of operators into XLA computations on CPU and "
                       "GPU devices.  0 = use ConfigProto setting; -1 = off; 1 = on for "
                       "things very likely to be improved; 2 = on for everything.  "
                       "Experimental."),
            Flag.bound("tf_xla_min_cluster_size", FlagKind.INT32, flags, "tf_xla_min_cluster_size",
                       "Minimum number of operators in an XLA compilation. Ignored for "
                       "operators placed on an XLA device or operators explicitly marked "
                       "for compilation."),
            Flag.bound("tf_xla_max_cluster_size", FlagKind.INT32, flags, "tf_xla_max_cluster_size",
                       "Maximum number of operators in an XLA compilation."),
            Flag.bound("tf_xla_clustering_debug", FlagKind.BOOL, flags, "tf_xla_clustering_debug",
                       "Dump graphs during XLA compilation."),
            Flag.bound("tf_xla_cpu_global_jit", FlagKind.BOOL, flags, "tf_xla_cpu_global_jit",
                       "Enables global JIT compilation for CPU via SessionOptions."),
            Flag.bound("tf_xla_clustering_fuel", FlagKind.INT64, flags, "tf_xla_clustering_fuel",
                       "Places an artificial limit on the number of ops marked as "
                       "eligible for clustering."),
            Flag.bound("tf_xla_disable_deadness_safety_checks_for_debugging", FlagKind.BOOL,
                       flags, "tf_xla_disable_deadness_safety_checks_for_debugging",
                       "Disable deadness related safety checks when clustering (this is "
                       "unsound)."),
        ]

    def _allocate_and_parse(self) -> None:
        self._initialization_count += 1

        self._build_ops_flags = BuildXlaOpsPassFlags()
        self._mark_for_compilation_flags = MarkForCompilationPassFlags()
        self._device_flags = XlaDeviceFlags()
        self._ops_flags = XlaOpsCommonFlags()
        jitter_flags = self._jitter_flags = IntroduceFloatingPointJitterPassFlags()

        def set_jitter_tensor_names(sequence: str) -> bool:
            jitter_flags.tensor_names = sequence.split(',')
            return True

        self._flag_table = FlagTable([
            Flag.bound("tf_xla_enable_lazy_compilation", FlagKind.BOOL,
                       self._build_ops_flags, "tf_xla_enable_lazy_compilation"),
            Flag.bound("tf_xla_print_cluster_outputs", FlagKind.BOOL,
                       self._build_ops_flags, "tf_xla_print_cluster_outputs",
                       "If true then insert Print nodes to print out values produced by "
                       "XLA clusters."),
            Flag.bound("tf_xla_compile_on_demand", FlagKind.BOOL,
                       self._device_flags, "tf_xla_compile_on_demand",
                       "Switch a device into 'on-demand' mode, where instead of "
                       "autoclustering ops are compiled one by one just-in-time."),
            Flag.bound("tf_xla_always_defer_compilation", FlagKind.BOOL,
                       self._ops_flags, "tf_xla_always_defer_compilation"),
            Flag.setter("tf_introduce_floating_point_jitter_to_tensors", set_jitter_tensor_names,
                        "The Tensors to add the jitter to.  The tensors are named in the "
                        "TensorId format of <node name>:<output idx>."),
            Flag.bound("tf_introduce_floating_point_jitter_amount", FlagKind.FLOAT,
                       jitter_flags, "jitter_amount",
                       "The amount of jitter to introduce.  This amount is added to each "
                       "element in the tensors named in `tensor_names`."),
        ])

        # Clustering flags must be parseable from the first read.
        self._flag_table.append(self._mark_for_compilation_flag_list())

        overrides = read_override_string(self.env_var, self._environ)
        applied = self._flag_table.parse(overrides)
        logger.info(f"JIT flags initialized from {self.env_var}: {applied} overrides applied")

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    @property
    def initialization_count(self) -> int:
        """How many times initialization has run (at most once)."""
        return self._initialization_count

    @property
    def flag_table(self) -> FlagTable:
        """The live descriptor table, after initialization."""
        self._ensure_initialized()
        return self._flag_table

    def get_build_xla_ops_pass_flags(self) -> BuildXlaOpsPassFlags:
        self._ensure_initialized()
        return self._build_ops_flags

    def get_mark_for_compilation_pass_flags(self) -> MarkForCompilationPassFlags:
        """
        Get the clustering flags.

        Unlike the other groups this one may be modified by callers, which is
        how passes that register extra descriptors against it write values.
        """
        self._ensure_initialized()
        return self._mark_for_compilation_flags

    def get_xla_device_flags(self) -> XlaDeviceFlags:
        self._ensure_initialized()
        return self._device_flags

    def get_xla_ops_common_flags(self) -> XlaOpsCommonFlags:
        self._ensure_initialized()
        return self._ops_flags

    def get_introduce_floating_point_jitter_pass_flags(self) -> IntroduceFloatingPointJitterPassFlags:
        self._ensure_initialized()
        return self._jitter_flags

    def append_mark_for_compilation_pass_flags(
            self, flag_list: Union[FlagTable, List[Flag]]) -> Union[FlagTable, List[Flag]]:
        """
        Append the clustering flags to a caller owned descriptor list.

        The appended descriptors write into the same clustering group this
        registry hands out, so the caller can parse its own source against
        them. The registry's overrides are not parsed again.

        Args:
            flag_list: A FlagTable or a plain list of Flag to extend

        Returns:
            ``flag_list``, for chaining
        """
        self._ensure_initialized()
        new_flags = self._mark_for_compilation_flag_list()
        if isinstance(flag_list, FlagTable):
            flag_list.append(new_flags)
        else:
            flag_list.extend(new_flags)
        return flag_list

    def append_descriptors(self, flags: Iterable[Flag]) -> FlagTable:
        """
        Append externally supplied descriptors to the live table.

        Nothing is re-parsed. Appends are not serialized by the registry;
        callers must not append concurrently.

        Returns:
            The live FlagTable
        """
        self._ensure_initialized()
        return self._flag_table.append(flags)


# Global registry instance
_registry: Optional[FlagRegistry] = None
_registry_lock = threading.Lock()


def get_registry(config: Optional[FlagsConfig] = None) -> FlagRegistry:
    """
    Get or create the process-wide default registry.

    Args:
        config: Configuration used only when the registry is first created.
            Defaults to get_flags_config()

    Returns:
        FlagRegistry: Shared registry instance
    """
    global _registry
    if _registry is not None:
        return _registry
    with _registry_lock:
        if _registry is None:
            _registry = FlagRegistry.from_config(config or get_flags_config())
        return _registry


def reset_registry() -> None:
    """Drop the process-wide default registry (useful for testing)."""
    global _registry
    with _registry_lock:
        _registry = None


def get_build_xla_ops_pass_flags() -> BuildXlaOpsPassFlags:
    return get_registry().get_build_xla_ops_pass_flags()


def get_mark_for_compilation_pass_flags() -> MarkForCompilationPassFlags:
    return get_registry().get_mark_for_compilation_pass_flags()


def get_xla_device_flags() -> XlaDeviceFlags:
    return get_registry().get_xla_device_flags()


def get_xla_ops_common_flags() -> XlaOpsCommonFlags:
    return get_registry().get_xla_ops_common_flags()


def get_introduce_floating_point_jitter_pass_flags() -> IntroduceFloatingPointJitterPassFlags:
    return get_registry().get_introduce_floating_point_jitter_pass_flags()


def append_mark_for_compilation_pass_flags(
        flag_list: Union[FlagTable, List[Flag]]) -> Union[FlagTable, List[Flag]]:
    return get_registry().append_mark_for_compilation_pass_flags(flag_list)
