"""One-call rendering of a type's structure tree into a string."""

from typing import Any, Optional

from typeshape.exceptions import ContractViolationError
from typeshape.metadata.provider import MetadataProvider
from typeshape.metadata.reflection import ReflectionProvider, _is_type_like
from typeshape.metadata.resolver import TypeNameResolver
from typeshape.metadata.schemas import TypeDescriptor, TypeRef
from .engine import TypeStructureVisitor
from .indentation import IndentationOption
from .sinks import CollectingSink


def render_type(
    target: Any,
    depth_limit: int = -1,
    option: Optional[IndentationOption] = None,
    provider: Optional[MetadataProvider] = None,
) -> str:
    """
    Render the structure tree of ``target``.

    Args:
        target: A class or typing alias, a type name, a TypeRef or a TypeDescriptor.
        depth_limit: Maximum depth (-1 = unlimited).
        option: Indentation option (default: four spaces per level).
        provider: Metadata provider (default: a fresh ReflectionProvider).

    Returns:
        The tree, one line per output line, each terminated by a newline.

    Raises:
        TypeNotFoundError: ``target`` is a name no lookup strategy resolves.
    """
    provider = provider or ReflectionProvider()

    if isinstance(target, (TypeDescriptor, TypeRef)):
        root = target
    elif isinstance(target, str):
        root = TypeNameResolver([provider]).resolve(target).ref
    elif isinstance(provider, ReflectionProvider) and _is_type_like(target):
        root = provider.ref_for(target)
    else:
        raise ContractViolationError(f"cannot render {target!r}: not a type, type name or type reference")

    sink = CollectingSink()
    TypeStructureVisitor(provider, option=option, depth_limit=depth_limit).visit(root, sink)
    return sink.getvalue()
