"""Data models for type metadata.

Descriptors are what a MetadataProvider hands to the traversal engine:
a type reference plus six ordered member collections.
"""

from typing import Any, List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field


BY_REF_SUFFIX = "&"
UNKNOWN_TYPE_NAME = "UNKNOWN"

ParameterModifier = Literal["none", "ref", "out"]


class TypeRef(BaseModel):
    """A comparable handle to a type plus its qualified display name."""

    model_config = ConfigDict(frozen=True)

    identity: Any = Field(description="Hashable identity used as the visited-set key")
    name: str = Field(description="Qualified display name")
    element: Optional["TypeRef"] = Field(
        None, description="Dereferenced element type (set only for by-reference types)"
    )

    @property
    def is_by_ref(self) -> bool:
        return self.element is not None

    @property
    def display_name(self) -> str:
        """Name with any by-reference decoration stripped."""
        if self.is_by_ref and self.name.endswith(BY_REF_SUFFIX):
            return self.name[: -len(BY_REF_SUFFIX)]
        return self.name

    def dereference(self) -> "TypeRef":
        """The type a by-reference handle points at, or self."""
        return self.element if self.element is not None else self


class ParameterDescriptor(BaseModel):
    """A method or constructor parameter."""

    name: str
    type: Optional[TypeRef] = Field(None, description="None when the provider could not resolve it")
    modifier: ParameterModifier = "none"
    is_variadic: bool = False


class FieldDescriptor(BaseModel):
    name: str
    type: Optional[TypeRef] = None


class PropertyDescriptor(BaseModel):
    name: str
    type: Optional[TypeRef] = None


class MethodDescriptor(BaseModel):
    """A method with its return type and ordered parameters."""

    name: str
    return_type: Optional[TypeRef] = None
    parameters: List[ParameterDescriptor] = Field(default_factory=list)
    compiler_generated: bool = Field(
        False, description="Synthesized by a compiler or code generator rather than authored"
    )


class ConstructorDescriptor(BaseModel):
    parameters: List[ParameterDescriptor] = Field(default_factory=list)


class EventDescriptor(BaseModel):
    name: str
    handler_type: Optional[TypeRef] = None


class NestedTypeDescriptor(BaseModel):
    type: TypeRef


class TypeDescriptor(BaseModel):
    """A type reference plus its six ordered member collections."""

    ref: TypeRef
    fields: List[FieldDescriptor] = Field(default_factory=list)
    properties: List[PropertyDescriptor] = Field(default_factory=list)
    methods: List[MethodDescriptor] = Field(default_factory=list)
    constructors: List[ConstructorDescriptor] = Field(default_factory=list)
    events: List[EventDescriptor] = Field(default_factory=list)
    nested_types: List[NestedTypeDescriptor] = Field(default_factory=list)

    @property
    def identity(self) -> Any:
        return self.ref.identity

    @property
    def name(self) -> str:
        return self.ref.name
