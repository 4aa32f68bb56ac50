"""
Override source for the JIT flags system.

Reads the raw override string from an environment variable and splits it
into whitespace separated tokens. If the variable's value names an existing
file, the overrides are read from that file instead.
"""

import logging
import os
import shlex
from pathlib import Path
from typing import List, Mapping, Optional


logger = logging.getLogger(__name__)


def _is_file(candidate: str) -> bool:
    try:
        return Path(candidate).is_file()
    except OSError:
        # Overrides longer than the filesystem name limit are not paths.
        return False


def read_override_string(env_var: str, environ: Optional[Mapping[str, str]] = None) -> str:
    """
    Get the override string for ``env_var``.

    Args:
        env_var: Name of the environment variable holding the overrides
        environ: Mapping to read from instead of os.environ

    Returns:
        The override text, or an empty string if the variable is unset
    """
    source = os.environ if environ is None else environ
    value = source.get(env_var, "") or ""

    candidate = value.strip()
    if candidate and _is_file(candidate):
        logger.debug(f"Reading {env_var} overrides from file {candidate}")
        return Path(candidate).read_text(encoding='utf-8')

    return value


def split_tokens(text: str) -> List[str]:
    """Split override text on whitespace, honouring shell-style quotes."""
    try:
        return shlex.split(text)
    except ValueError as e:
        raise ValueError(f"Malformed override string {text!r}: {e}")
