"""
Output sinks for the structure tree.

A sink receives whole lines. MultiSink fans every call out to several
destinations so each one observes the same line sequence.
"""

import sys
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Iterable, List, TextIO

from typeshape.exceptions import ContractViolationError, SinkClosedError


class OutputSink(ABC):
    """Line-oriented output destination."""

    def __init__(self):
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def is_console(self) -> bool:
        """True when the sink writes to the process's stdout/stderr."""
        return False

    def _check_open(self) -> None:
        if self._closed:
            raise SinkClosedError(f"{type(self).__name__} is closed")

    @abstractmethod
    def write_line(self, line: str) -> None:
        ...

    def flush(self) -> None:
        self._check_open()

    def close(self) -> None:
        self._closed = True

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        if not self._closed:
            self.close()
        return False


class StreamSink(OutputSink):
    """Writes lines to a text stream."""

    def __init__(self, stream: TextIO, owns_stream: bool = False):
        super().__init__()
        if stream is None or not callable(getattr(stream, "write", None)):
            raise ContractViolationError("StreamSink requires a writable text stream")
        self.stream = stream
        self.owns_stream = owns_stream

    @property
    def is_console(self) -> bool:
        return any(self.stream is s for s in (sys.stdout, sys.stderr, sys.__stdout__, sys.__stderr__))

    def write_line(self, line: str) -> None:
        self._check_open()
        self.stream.write(line + "\n")

    def flush(self) -> None:
        self._check_open()
        self.stream.flush()

    def close(self) -> None:
        if self._closed:
            return
        self.stream.flush()
        if self.owns_stream and not self.is_console:
            self.stream.close()
        super().close()


class CollectingSink(OutputSink):
    """Keeps lines in memory."""

    def __init__(self):
        super().__init__()
        self.lines: List[str] = []

    def write_line(self, line: str) -> None:
        self._check_open()
        self.lines.append(line)

    def getvalue(self) -> str:
        return "".join(line + "\n" for line in self.lines)


class MultiSink(OutputSink):
    """
    Fan-out sink duplicating every write to each distinct target, in order.

    Closing a MultiSink closes its targets, except console sinks which are
    only flushed.
    """

    def __init__(self, targets: Iterable[OutputSink]):
        super().__init__()
        if targets is None:
            raise ContractViolationError("MultiSink requires a collection of targets")

        distinct: List[OutputSink] = []
        for target in targets:
            if not isinstance(target, OutputSink):
                raise ContractViolationError(f"MultiSink target must be an OutputSink, got {type(target).__name__}")
            if not any(target is existing for existing in distinct):
                distinct.append(target)

        if not distinct:
            raise ContractViolationError("MultiSink requires at least one target")
        self.targets = tuple(distinct)

    def write_line(self, line: str) -> None:
        self._check_open()
        for target in self.targets:
            target.write_line(line)

    def flush(self) -> None:
        self._check_open()
        for target in self.targets:
            target.flush()

    def close(self) -> None:
        if self._closed:
            return
        for target in self.targets:
            if target.closed:
                continue
            if target.is_console:
                target.flush()
            else:
                target.close()
        super().close()


def open_file_sink(path: Path) -> StreamSink:
    """UTF-8 file sink; the file is truncated on open."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    return StreamSink(open(path, "w", encoding="utf-8"), owns_stream=True)


def as_sink(target: Any) -> OutputSink:
    """Accept an OutputSink or a writable text stream; anything else is a contract violation."""
    if isinstance(target, OutputSink):
        if target.closed:
            raise SinkClosedError(f"{type(target).__name__} is closed")
        return target
    if target is not None and callable(getattr(target, "write", None)):
        return StreamSink(target)
    raise ContractViolationError("an output sink (OutputSink or writable text stream) is required")
