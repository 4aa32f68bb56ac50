"""
JIT Flags Testing Package

Testing suite for the JIT flags system.
"""

from .test_flag_table import main as run_flag_table_tests
from .test_registry import main as run_registry_tests
from .test_concurrent_initialization import main as run_concurrency_tests
from .test_config_and_cli import main as run_config_tests

__all__ = [
    "run_flag_table_tests",
    "run_registry_tests",
    "run_concurrency_tests",
    "run_config_tests",
]
