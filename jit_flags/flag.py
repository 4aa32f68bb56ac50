"""
Flag descriptors for the JIT flags system.

A Flag binds a command-line style name and help text to either a typed
attribute on a flag group or to a custom setter function. Flags do not hold
values themselves; values live on the flag group objects owned by the
FlagRegistry.
"""

import re
from enum import Enum
from typing import Any, Callable, Optional


INT32_MIN = -(2 ** 31)
INT32_MAX = 2 ** 31 - 1
INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1

_TRUE_VALUES = ('true', '1')
_FALSE_VALUES = ('false', '0')
_INT_PATTERN = re.compile(r"[+-]?[0-9]+")


class FlagParseError(ValueError):
    """Base class for errors raised while parsing flag overrides."""

    def __init__(self, flag_name: str, message: str):
        super().__init__(message)
        self.flag_name = flag_name


class UnknownFlagError(FlagParseError):
    """Raised when an override names a flag that is not in the table."""

    def __init__(self, flag_name: str):
        super().__init__(flag_name, f"Unknown flag '{flag_name}'")


class FlagValueError(FlagParseError):
    """Raised when a known flag is given a value it cannot accept."""

    def __init__(self, flag_name: str, value: Optional[str], reason: str = ""):
        detail = f": {reason}" if reason else ""
        super().__init__(flag_name, f"Invalid value {value!r} for flag '{flag_name}'{detail}")
        self.value = value


class FlagKind(Enum):
    """The value kinds a flag can carry."""
    BOOL = "bool"
    INT32 = "int32"
    INT64 = "int64"
    FLOAT = "float"
    CUSTOM = "custom"
    """Raw string handed to a setter function."""


def _parse_bool(name: str, raw: Optional[str]) -> bool:
    if raw is None:
        return True
    lowered = raw.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise FlagValueError(name, raw, "expected true, false, 1 or 0")


def _parse_int(name: str, raw: str, low: int, high: int) -> int:
    if not _INT_PATTERN.fullmatch(raw):
        raise FlagValueError(name, raw, "expected a base-10 integer")
    value = int(raw, 10)
    if not (low <= value <= high):
        raise FlagValueError(name, raw, f"out of range [{low}, {high}]")
    return value


def _parse_float(name: str, raw: str) -> float:
    try:
        return float(raw.strip())
    except ValueError:
        raise FlagValueError(name, raw, "expected a floating point number")


class Flag:
    """
    A single flag descriptor.

    Use Flag.bound() for flags that write straight into an attribute of a
    flag group, and Flag.setter() for flags whose raw string is handed to a
    function. Both kinds live in the same FlagTable and parse the same way.

    Examples:
        ```python
        groups = MarkForCompilationPassFlags()
        MIN_SIZE = Flag.bound("tf_xla_min_cluster_size", FlagKind.INT32,
                              groups, "tf_xla_min_cluster_size", "Minimum ops.")

        names = []
        TENSORS = Flag.setter("tensors", lambda s: names.extend(s.split(",")) or True,
                              "Tensors to touch.")
        ```

    Attributes:
        name: Flag name as written in the override string
        kind: The FlagKind used to convert raw values
        help: Description shown in usage output
    """

    def __init__(self, name: str, kind: FlagKind, help: str = "",
                 owner: Any = None, attribute: Optional[str] = None,
                 setter: Optional[Callable[[str], bool]] = None):
        if kind is FlagKind.CUSTOM:
            if setter is None:
                raise ValueError(f"Custom flag '{name}' needs a setter")
        elif owner is None or attribute is None:
            raise ValueError(f"Flag '{name}' needs an owner and an attribute")
        self.name = name
        self.kind = kind
        self.help = help
        self._owner = owner
        self._attribute = attribute
        self._setter = setter

    @classmethod
    def bound(cls, name: str, kind: FlagKind, owner: Any, attribute: str,
              help: str = "") -> 'Flag':
        """Create a flag that writes to ``owner.attribute``."""
        return cls(name, kind, help, owner=owner, attribute=attribute)

    @classmethod
    def setter(cls, name: str, setter: Callable[[str], bool], help: str = "") -> 'Flag':
        """Create a flag whose raw value is passed to ``setter``."""
        return cls(name, FlagKind.CUSTOM, help, setter=setter)

    @property
    def is_custom(self) -> bool:
        return self.kind is FlagKind.CUSTOM

    @property
    def owner(self) -> Any:
        """The object this flag writes to, or None for custom flags."""
        return self._owner

    def convert(self, raw: Optional[str]) -> Any:
        """
        Convert a raw override value according to this flag's kind.

        Args:
            raw: The text after ``=``, or None for a bare token

        Returns:
            The converted value (the raw string for custom flags)

        Raises:
            FlagValueError: If the value does not parse as this kind
        """
        if self.kind is FlagKind.BOOL:
            return _parse_bool(self.name, raw)
        if raw is None:
            raise FlagValueError(self.name, raw, f"a {self.kind.value} flag needs a value")
        if self.kind is FlagKind.INT32:
            return _parse_int(self.name, raw, INT32_MIN, INT32_MAX)
        if self.kind is FlagKind.INT64:
            return _parse_int(self.name, raw, INT64_MIN, INT64_MAX)
        if self.kind is FlagKind.FLOAT:
            return _parse_float(self.name, raw)
        return raw

    def apply(self, value: Any) -> None:
        """
        Write an already converted value through the target or setter.

        Raises:
            FlagValueError: If a custom setter reports failure
        """
        if self.is_custom:
            if not self._setter(value):
                raise FlagValueError(self.name, value, "rejected by setter")
            return
        setattr(self._owner, self._attribute, value)

    def current_value(self) -> Any:
        """Current value of the bound attribute, or None for custom flags."""
        if self.is_custom:
            return None
        return getattr(self._owner, self._attribute)

    def __repr__(self) -> str:
        return f"Flag(name={self.name!r}, kind={self.kind.value})"

    def __str__(self) -> str:
        return self.name
