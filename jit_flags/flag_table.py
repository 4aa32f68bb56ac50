"""
Ordered table of flag descriptors.

The FlagTable parses override strings of the form
``name1=value1,name2=value2 --name3=value3 bare_bool_flag`` against its
descriptors and supports appending more descriptors later without
re-parsing anything.
"""

import logging
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple, Union

from .env_source import split_tokens
from .flag import Flag, UnknownFlagError


logger = logging.getLogger(__name__)


class FlagTable:
    """
    An ordered sequence of Flag descriptors.

    When two descriptors share a name, lookups and parsing resolve to the
    one appended first.
    """

    def __init__(self, flags: Optional[Iterable[Flag]] = None):
        self._flags: List[Flag] = []
        self._index: Dict[str, Flag] = {}
        if flags is not None:
            self.append(flags)

    def append(self, flags: Iterable[Flag]) -> 'FlagTable':
        """
        Append descriptors to the end of the table.

        Existing descriptors and the storage they are bound to are left
        untouched and nothing is re-parsed.

        Args:
            flags: A FlagTable or any iterable of Flag

        Returns:
            Self for method chaining
        """
        new_flags = list(flags)
        for flag in new_flags:
            self._flags.append(flag)
            if flag.name in self._index:
                logger.debug(f"Duplicate flag '{flag.name}' appended; earlier descriptor keeps precedence")
            else:
                self._index[flag.name] = flag
        logger.debug(f"Appended {len(new_flags)} flags, table now holds {len(self._flags)}")
        return self

    def lookup(self, name: str) -> Optional[Flag]:
        """Get the first descriptor named ``name``, or None."""
        return self._index.get(name)

    def names(self) -> List[str]:
        """Names of all descriptors in table order (duplicates included)."""
        return [flag.name for flag in self._flags]

    def parse(self, overrides: Union[str, Iterable[str]]) -> int:
        """
        Parse overrides and write them into the bound storage.

        Every token is resolved and converted before anything is written, so
        a bad token leaves all bound storage untouched. Custom setters then
        run in token order.

        Args:
            overrides: Override text, or an already split list of tokens

        Returns:
            The number of overrides applied

        Raises:
            UnknownFlagError: If a token names a flag not in the table
            FlagValueError: If a value cannot be converted or a setter fails
        """
        tokens = split_tokens(overrides) if isinstance(overrides, str) else list(overrides)

        resolved: List[Tuple[Flag, Any]] = []
        for name, raw in self._pairs(tokens):
            flag = self.lookup(name)
            if flag is None:
                raise UnknownFlagError(name)
            resolved.append((flag, flag.convert(raw)))

        for flag, value in resolved:
            flag.apply(value)
            logger.debug(f"Flag '{flag.name}' set to {value!r}")

        return len(resolved)

    def _starts_pair(self, segment: str) -> bool:
        return '=' in segment or segment.startswith('--') or segment in self._index

    def _pairs(self, tokens: List[str]) -> Iterator[Tuple[str, Optional[str]]]:
        """
        Yield ``(name, raw_value)`` pairs from tokens.

        A comma separated segment that does not look like the start of a new
        flag continues the previous value, so list-valued flags such as
        ``tensors=a,b,c`` keep their commas.
        """
        for token in tokens:
            pieces: List[str] = []
            for segment in token.split(','):
                if pieces and not self._starts_pair(segment):
                    pieces[-1] = f"{pieces[-1]},{segment}"
                elif segment:
                    pieces.append(segment)

            for piece in pieces:
                if piece.startswith('--'):
                    piece = piece[2:]
                name, sep, raw = piece.partition('=')
                yield name, (raw if sep else None)

    def usage(self) -> str:
        """Human readable listing of every descriptor, its current value and help."""
        lines = []
        for flag in self._flags:
            if flag.is_custom:
                header = f"  --{flag.name}=<string>"
            else:
                header = f"  --{flag.name}=<{flag.kind.value}> (current: {flag.current_value()!r})"
            lines.append(header)
            if flag.help:
                lines.append(f"      {flag.help}")
        return "\n".join(lines)

    def __iter__(self) -> Iterator[Flag]:
        return iter(list(self._flags))

    def __len__(self) -> int:
        return len(self._flags)

    def __contains__(self, name: object) -> bool:
        return name in self._index

    def __repr__(self) -> str:
        return f"FlagTable({len(self._flags)} flags)"
