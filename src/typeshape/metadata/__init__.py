"""Type metadata: descriptors, providers and type name resolution."""

from .schemas import (
    BY_REF_SUFFIX,
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
from .provider import MetadataProvider
from .reflection import ReflectionProvider, type_name
from .schema_provider import SchemaDocument, SchemaProvider
from .resolver import Resolution, TypeNameResolver

__all__ = [
    "BY_REF_SUFFIX",
    "UNKNOWN_TYPE_NAME",
    "ConstructorDescriptor",
    "EventDescriptor",
    "FieldDescriptor",
    "MethodDescriptor",
    "NestedTypeDescriptor",
    "ParameterDescriptor",
    "PropertyDescriptor",
    "TypeDescriptor",
    "TypeRef",
    "MetadataProvider",
    "ReflectionProvider",
    "type_name",
    "SchemaDocument",
    "SchemaProvider",
    "Resolution",
    "TypeNameResolver",
]
