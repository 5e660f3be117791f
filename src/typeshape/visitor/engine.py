"""Recursive type structure visitor.

Walks a type's member graph depth first and writes an indented, brace
delimited text tree:

    Type demo.Pair Has 2 Fields
    {
        Name=left HasType=builtins.int
        Type builtins.int Has 0 Fields
        ...

        Name=right HasType=builtins.int
        Type builtins.int Has Been Visited.
    }
    Type demo.Pair Has 0 Properties
    ...

One visited-set is shared by the whole traversal of a root type, so every
type is expanded at most once; the root call clears it on every exit path.
"""

from typing import Callable, List, Optional, Sequence, TextIO, Union

from typeshape.exceptions import ContractViolationError, MetadataError
from typeshape.logging_config import logger
from typeshape.metadata.provider import MetadataProvider
from typeshape.metadata.schemas import (
    UNKNOWN_TYPE_NAME,
    ConstructorDescriptor,
    EventDescriptor,
    FieldDescriptor,
    MethodDescriptor,
    NestedTypeDescriptor,
    ParameterDescriptor,
    PropertyDescriptor,
    TypeDescriptor,
    TypeRef,
)
from typeshape.tracing import trace
from .context import TraversalContext, VisitStats
from .indentation import DEFAULT_INDENTATION, IndentationOption
from .sinks import OutputSink, as_sink


FIELDS = "Fields"
PROPERTIES = "Properties"
METHODS = "Methods"
CONSTRUCTORS = "Constructors"
EVENTS = "Events"
NESTED_TYPES = "Nested Types"

CATEGORY_ORDER = (FIELDS, PROPERTIES, METHODS, CONSTRUCTORS, EVENTS, NESTED_TYPES)

ELLIPSIS = "..."


class TypeStructureVisitor:
    """Renders the structure of a type and, recursively, of its members' types."""

    def __init__(
        self,
        provider: MetadataProvider,
        option: Optional[IndentationOption] = None,
        depth_limit: int = -1,
    ):
        if not isinstance(provider, MetadataProvider):
            raise ContractViolationError("a MetadataProvider is required")
        self.provider = provider
        self.option = option or DEFAULT_INDENTATION
        self.depth_limit = -1
        self.use_recursion_depth_limit(depth_limit)
        self.last_stats: Optional[VisitStats] = None

    def use_recursion_depth_limit(self, limit: int) -> "TypeStructureVisitor":
        """Set the depth limit (-1 = unlimited) and return self."""
        if isinstance(limit, bool) or not isinstance(limit, int) or limit < -1:
            raise ContractViolationError(f"depth limit must be -1 or a non-negative integer, got {limit!r}")
        self.depth_limit = limit
        return self

    @trace
    def visit(self, root: Union[TypeDescriptor, TypeRef], sink: Union[OutputSink, TextIO]) -> None:
        """
        Write the structure tree of ``root`` to ``sink``.

        Args:
            root: Descriptor of the root type, or a reference the provider can describe.
            sink: Output sink (or writable text stream).

        Raises:
            ContractViolationError: missing sink or unsupported root.
            MetadataError: the provider could not describe the root type.
        """
        sink = as_sink(sink)
        if isinstance(root, TypeDescriptor):
            ref, descriptor = root.ref, root
        elif isinstance(root, TypeRef):
            ref, descriptor = root, None
        else:
            raise ContractViolationError(f"root must be a TypeDescriptor or TypeRef, got {type(root).__name__}")

        context = TraversalContext(sink=sink, option=self.option, depth_limit=self.depth_limit)
        self.last_stats = context.stats
        logger.debug(f"Visiting {ref.name} (depth limit {self.depth_limit})")
        self._visit(ref, context, descriptor)

    def _visit(self, ref: TypeRef, context: TraversalContext, descriptor: Optional[TypeDescriptor] = None) -> None:
        if context.at_limit():
            context.stats.truncations += 1
            context.emit(ELLIPSIS)
            return

        if ref.identity in context.visited:
            context.stats.cycles += 1
            context.emit(f"Type {ref.name} Has Been Visited.")
            return

        try:
            if descriptor is None:
                try:
                    descriptor = self.provider.describe(ref)
                except MetadataError as e:
                    if context.is_root:
                        raise
                    logger.warning(f"Could not describe {ref.name}: {e}")
                    context.stats.unresolved += 1
                    context.emit(f"Type {ref.name} Is {UNKNOWN_TYPE_NAME}.")
                    return

            context.visited.add(ref.identity)
            context.stats.types_expanded += 1
            self._emit_categories(descriptor, context)
        finally:
            if context.is_root:
                context.visited.clear()

    def _emit_categories(self, descriptor: TypeDescriptor, context: TraversalContext) -> None:
        inner = context.deeper()
        name = descriptor.name

        methods = [m for m in descriptor.methods if not m.compiler_generated]

        self._emit_category(context, name, FIELDS, descriptor.fields,
                            lambda i, member: self._emit_field(member, inner))
        self._emit_category(context, name, PROPERTIES, descriptor.properties,
                            lambda i, member: self._emit_property(member, inner))
        self._emit_category(context, name, METHODS, methods,
                            lambda i, member: self._emit_method(member, inner))
        self._emit_category(context, name, CONSTRUCTORS, descriptor.constructors,
                            lambda i, member: self._emit_constructor(i, member, inner))
        self._emit_category(context, name, EVENTS, descriptor.events,
                            lambda i, member: self._emit_event(member, inner))
        self._emit_category(context, name, NESTED_TYPES, descriptor.nested_types,
                            lambda i, member: self._emit_nested_type(member, inner))

    def _emit_category(
        self,
        context: TraversalContext,
        type_name: str,
        category: str,
        members: Sequence,
        emit_member: Callable[[int, object], None],
    ) -> None:
        context.emit(f"Type {type_name} Has {len(members)} {category}")
        if not members:
            return

        context.emit("{")
        for i, member in enumerate(members):
            if i:
                context.blank()
            emit_member(i, member)
        context.emit("}")

    # -- member lines (context is already one level deeper) --------------------

    def _emit_field(self, field: FieldDescriptor, context: TraversalContext) -> None:
        context.emit(f"Name={field.name} HasType={self._label(field.type)}")
        self._descend(field.type, context, field.name)

    def _emit_property(self, prop: PropertyDescriptor, context: TraversalContext) -> None:
        context.emit(f"Name={prop.name} Has Value Type={self._label(prop.type)}")
        self._descend(prop.type, context, prop.name)

    def _emit_method(self, method: MethodDescriptor, context: TraversalContext) -> None:
        context.emit(f"Method {method.name} Has Return Type: {self._label(method.return_type)}")
        self._descend(method.return_type, context, method.name)

        context.emit(f"Has {len(method.parameters)} Parameters")
        self._emit_parameter_block(method.parameters, context)

    def _emit_constructor(self, index: int, constructor: ConstructorDescriptor, context: TraversalContext) -> None:
        context.emit(f"Constructor {index} Has {len(constructor.parameters)} Parameters")
        self._emit_parameter_block(constructor.parameters, context)

    def _emit_event(self, event: EventDescriptor, context: TraversalContext) -> None:
        context.emit(f"Event {event.name} Has Delegate {self._label(event.handler_type)}")
        self._descend(event.handler_type, context, event.name)

    def _emit_nested_type(self, nested: NestedTypeDescriptor, context: TraversalContext) -> None:
        self._visit(nested.type, context)

    # -- parameters ------------------------------------------------------------

    def _emit_parameter_block(self, parameters: List[ParameterDescriptor], context: TraversalContext) -> None:
        """Braced parameter list; parameters sit one level below the braces."""
        if not parameters:
            return

        context.emit("{")
        parameter_context = context.deeper()
        for i, parameter in enumerate(parameters):
            if i:
                parameter_context.blank()
            parameter_context.emit(
                f"Parameter {parameter.name} Has Type: {self._modifier(parameter)}{self._display_name(parameter.type)}"
            )
            target = parameter.type.dereference() if parameter.type is not None else None
            self._descend(target, parameter_context, parameter.name)
        context.emit("}")

    @staticmethod
    def _modifier(parameter: ParameterDescriptor) -> str:
        if parameter.modifier == "out":
            return "out "
        if parameter.modifier == "ref" or (parameter.type is not None and parameter.type.is_by_ref):
            return "ref "
        return ""

    # -- helpers ---------------------------------------------------------------

    @staticmethod
    def _label(ref: Optional[TypeRef]) -> str:
        return ref.name if ref is not None else UNKNOWN_TYPE_NAME

    @staticmethod
    def _display_name(ref: Optional[TypeRef]) -> str:
        return ref.display_name if ref is not None else UNKNOWN_TYPE_NAME

    def _descend(self, ref: Optional[TypeRef], context: TraversalContext, member_name: str) -> None:
        if ref is None:
            context.stats.unresolved += 1
            logger.debug(f"Member '{member_name}' has no resolvable type; not descending")
            return
        self._visit(ref, context)
