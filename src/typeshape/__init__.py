"""
TypeShape - Type Structure Visitor

Renders the member structure of a type (fields, properties, methods,
constructors, events, nested types) as an indented text tree.
"""

__version__ = "1.0.0"

# Core exports
from typeshape.metadata import (
    MetadataProvider,
    ReflectionProvider,
    SchemaProvider,
    TypeDescriptor,
    TypeNameResolver,
    TypeRef,
)
from typeshape.visitor import (
    CollectingSink,
    IndentationOption,
    MultiSink,
    StreamSink,
    TypeStructureVisitor,
    indent,
    render_type,
)
from typeshape.config import VisitorSettings

__all__ = [
    "__version__",
    "MetadataProvider",
    "ReflectionProvider",
    "SchemaProvider",
    "TypeDescriptor",
    "TypeNameResolver",
    "TypeRef",
    "CollectingSink",
    "IndentationOption",
    "MultiSink",
    "StreamSink",
    "TypeStructureVisitor",
    "indent",
    "render_type",
    "VisitorSettings",
]
