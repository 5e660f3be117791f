"""Traversal state threaded through every recursive descent of one root visit."""

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Set

from .indentation import IndentationOption
from .sinks import OutputSink


@dataclass
class VisitStats:
    """Counters for one root visit."""
    types_expanded: int = 0
    cycles: int = 0
    truncations: int = 0
    unresolved: int = 0
    lines: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            "types_expanded": self.types_expanded,
            "cycles": self.cycles,
            "truncations": self.truncations,
            "unresolved": self.unresolved,
            "lines": self.lines,
        }


@dataclass
class TraversalContext:
    """
    Shared traversal state.

    ``visited``, ``stats`` and ``sink`` are shared by reference between a
    context and every context derived from it; only ``depth`` and
    ``is_root`` differ.
    """
    sink: OutputSink
    option: IndentationOption
    depth_limit: int = -1
    depth: int = 0
    visited: Set[Any] = field(default_factory=set)
    stats: VisitStats = field(default_factory=VisitStats)
    is_root: bool = True

    @property
    def indentation(self) -> str:
        return self.option.indent(self.depth)

    def deeper(self, levels: int = 1) -> "TraversalContext":
        return replace(self, depth=self.depth + levels, is_root=False)

    def at_limit(self) -> bool:
        return self.depth_limit >= 0 and self.depth >= self.depth_limit

    def emit(self, text: str) -> None:
        """Write one line at this context's indentation."""
        self.sink.write_line(self.indentation + text)
        self.stats.lines += 1

    def blank(self) -> None:
        self.sink.write_line("")
        self.stats.lines += 1
