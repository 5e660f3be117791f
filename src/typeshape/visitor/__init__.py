"""Structure tree traversal: engine, indentation, traversal context and output sinks."""

from .indentation import DEFAULT_INDENTATION, IndentationOption, indent
from .sinks import CollectingSink, MultiSink, OutputSink, StreamSink, as_sink, open_file_sink
from .context import TraversalContext, VisitStats
from .engine import CATEGORY_ORDER, TypeStructureVisitor
from .facade import render_type

__all__ = [
    "DEFAULT_INDENTATION",
    "IndentationOption",
    "indent",
    "CollectingSink",
    "MultiSink",
    "OutputSink",
    "StreamSink",
    "as_sink",
    "open_file_sink",
    "TraversalContext",
    "VisitStats",
    "CATEGORY_ORDER",
    "TypeStructureVisitor",
    "render_type",
]
