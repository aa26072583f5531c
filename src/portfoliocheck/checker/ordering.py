"""Batch ordering: bogus results surface ahead of everything else."""

from __future__ import annotations

import collections
from typing import Iterable, List

from .verdict import Verdict, format_line


def order_lines(verdicts: Iterable[Verdict]) -> List[str]:
    """Brief: Render verdicts in query order, moving bogus lines to the front.

    Inputs:
      - verdicts: Verdicts in the order the names were queried.

    Outputs:
      - list[str]: rendered lines. Each bogus line is inserted at the front as
        it is encountered, so bogus lines come out in reverse encounter order;
        all other lines keep their encounter order after them.

    Example:
      >>> from portfoliocheck.checker.outcome import SecurityLevel
      >>> a = Verdict("a.test", None, SecurityLevel.INSECURE, None)
      >>> b = Verdict("b.test", None, SecurityLevel.BOGUS, "x")
      >>> order_lines([a, b])
      ['b.test,"",bogus,x', 'a.test,"",insecure,""']
    """

    lines: collections.deque[str] = collections.deque()
    for verdict in verdicts:
        line = format_line(verdict.name, verdict)
        if verdict.is_bogus:
            lines.appendleft(line)
        else:
            lines.append(line)
    return list(lines)
