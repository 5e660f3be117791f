"""Metadata provider interface.

The traversal engine depends on "how types are introspected" only through
this interface. Concrete providers enumerate members from native Python
reflection or from a serialized schema document.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional

from typeshape.logging_config import logger
from .schemas import (
    ConstructorDescriptor,
    EventDescriptor,
    FieldDescriptor,
    MethodDescriptor,
    NestedTypeDescriptor,
    PropertyDescriptor,
    TypeDescriptor,
    TypeRef,
)


class MetadataProvider(ABC):
    """Enumerates the members of a type in stable declaration order."""

    #: Short label used in diagnostics and the CLI ("reflection", "schema").
    kind: str = "abstract"

    # -- lookup strategies -------------------------------------------------

    @abstractmethod
    def lookup(self, name: str) -> Optional[TypeRef]:
        """Direct resolution of a fully qualified name."""

    @abstractmethod
    def search(self, name: str) -> Optional[TypeRef]:
        """Search among the types this provider already has available."""

    @abstractmethod
    def load_path(self, path: Path) -> bool:
        """Make the types found at ``path`` available. Returns True if anything loaded."""

    # -- member enumeration ------------------------------------------------

    @abstractmethod
    def fields(self, ref: TypeRef) -> List[FieldDescriptor]:
        ...

    @abstractmethod
    def properties(self, ref: TypeRef) -> List[PropertyDescriptor]:
        ...

    @abstractmethod
    def methods(self, ref: TypeRef) -> List[MethodDescriptor]:
        ...

    @abstractmethod
    def constructors(self, ref: TypeRef) -> List[ConstructorDescriptor]:
        ...

    @abstractmethod
    def events(self, ref: TypeRef) -> List[EventDescriptor]:
        ...

    @abstractmethod
    def nested_types(self, ref: TypeRef) -> List[NestedTypeDescriptor]:
        ...

    def describe(self, ref: TypeRef) -> TypeDescriptor:
        """
        Assemble the full descriptor for a type.

        Compiler-generated methods are dropped here so that no provider can
        leak them into the Methods category or its count.
        """
        methods = self.methods(ref)
        authored = [m for m in methods if not m.compiler_generated]
        if len(authored) != len(methods):
            logger.debug(f"Skipped {len(methods) - len(authored)} generated methods on {ref.name}")

        return TypeDescriptor(
            ref=ref,
            fields=self.fields(ref),
            properties=self.properties(ref),
            methods=authored,
            constructors=self.constructors(ref),
            events=self.events(ref),
            nested_types=self.nested_types(ref),
        )
