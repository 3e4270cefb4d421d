"""
Statement records.

An Exec is one planned side-effecting SQL statement: query text with
positional $n placeholders and the ordered values bound to them. A Plan
is an ordered list of Exec values; it is data, so it can be built and
compared without a live database.
"""

import re
from dataclasses import dataclass
from typing import Any, Iterator, List, Tuple


PLACEHOLDER_RE = re.compile(r"\$(\d+)")
SECRET_RE = re.compile(r"\bPASSWORD\s+\$(\d+)", re.IGNORECASE)


def placeholders(query: str) -> Iterator[int]:
    """Yield the 1-based placeholder indices of a query, in order of appearance."""
    for match in PLACEHOLDER_RE.finditer(query):
        yield int(match.group(1))


@dataclass(frozen=True)
class Exec:
    """A single planned statement."""
    query: str
    args: Tuple[Any, ...] = ()

    def __post_init__(self):
        # lists are accepted for convenience, stored as tuples
        if not isinstance(self.args, tuple):
            object.__setattr__(self, "args", tuple(self.args))

    def masked_args(self) -> Tuple[Any, ...]:
        """Arguments with password values replaced, for display."""
        secret = {int(m.group(1)) for m in SECRET_RE.finditer(self.query)}
        return tuple(
            "***" if position in secret else value
            for position, value in enumerate(self.args, start=1)
        )

    def validate(self) -> None:
        """Raise ValueError if a placeholder has no bound argument."""
        for index in placeholders(self.query):
            if index < 1 or index > len(self.args):
                raise ValueError(
                    f"Placeholder ${index} out of range for {len(self.args)} argument(s): {self.query}"
                )


Plan = List[Exec]
