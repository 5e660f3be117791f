"""Serialized schema provider.

Describes types from JSON documents, e.g. a metadata dump of another
runtime's types. Document layout::

    {
      "types": [
        {
          "name": "Demo.Account",
          "fields": [{"name": "_id", "type": "System.Int32"}],
          "properties": [{"name": "Owner", "type": "Demo.Person"}],
          "methods": [
            {
              "name": "TryGet",
              "return_type": "System.Boolean",
              "parameters": [
                {"name": "value", "type": "System.Int32&", "modifier": "out"}
              ]
            }
          ],
          "constructors": [{"parameters": []}],
          "events": [{"name": "Changed", "handler_type": "System.EventHandler"}],
          "nested_types": ["Demo.Account+Entry"]
        }
      ]
    }

Type names ending in ``&`` are by-reference types whose element type is the
same name without the suffix. Types that are referenced but not described
are opaque leaves.
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Set

from pydantic import BaseModel, Field, ValidationError

from typeshape.exceptions import SchemaError
from typeshape.logging_config import logger
from .provider import MetadataProvider
from .schemas import (
    BY_REF_SUFFIX,
    ConstructorDescriptor,
    EventDescriptor,
    FieldDescriptor,
    MethodDescriptor,
    NestedTypeDescriptor,
    ParameterDescriptor,
    ParameterModifier,
    PropertyDescriptor,
    TypeRef,
)


class SchemaParameter(BaseModel):
    name: str
    type: Optional[str] = None
    modifier: ParameterModifier = "none"
    variadic: bool = False


class SchemaMember(BaseModel):
    """A field or property entry."""

    name: str
    type: Optional[str] = None


class SchemaMethod(BaseModel):
    name: str
    return_type: Optional[str] = None
    parameters: List[SchemaParameter] = Field(default_factory=list)
    compiler_generated: bool = False


class SchemaConstructor(BaseModel):
    parameters: List[SchemaParameter] = Field(default_factory=list)


class SchemaEvent(BaseModel):
    name: str
    handler_type: Optional[str] = None


class SchemaType(BaseModel):
    name: str
    fields: List[SchemaMember] = Field(default_factory=list)
    properties: List[SchemaMember] = Field(default_factory=list)
    methods: List[SchemaMethod] = Field(default_factory=list)
    constructors: List[SchemaConstructor] = Field(default_factory=list)
    events: List[SchemaEvent] = Field(default_factory=list)
    nested_types: List[str] = Field(default_factory=list)


class SchemaDocument(BaseModel):
    types: List[SchemaType] = Field(default_factory=list)


def _short_name(name: str) -> str:
    return name.replace("+", ".").rsplit(".", 1)[-1]


class SchemaProvider(MetadataProvider):
    """Metadata provider backed by one or more schema documents."""

    kind = "schema"

    def __init__(self, documents: Optional[List[SchemaDocument]] = None):
        self._types: Dict[str, SchemaType] = {}
        self._loaded_paths: Set[Path] = set()
        for document in documents or []:
            self.add_document(document)

    @classmethod
    def from_dict(cls, data: Dict[str, Any], source: str = "<dict>") -> "SchemaProvider":
        provider = cls()
        provider.add_document(provider._validate(data, source), source)
        return provider

    @classmethod
    def from_file(cls, path: Path) -> "SchemaProvider":
        provider = cls()
        if not provider.load_path(Path(path)):
            raise SchemaError(str(path), "no schema document found")
        return provider

    @property
    def type_names(self) -> List[str]:
        return list(self._types)

    def add_document(self, document: SchemaDocument, source: str = "<memory>") -> None:
        """Register every type of a document; duplicate names are rejected."""
        incoming: Dict[str, SchemaType] = {}
        for schema_type in document.types:
            if schema_type.name in self._types or schema_type.name in incoming:
                raise SchemaError(source, f"duplicate type '{schema_type.name}'")
            incoming[schema_type.name] = schema_type
        self._types.update(incoming)
        logger.debug(f"Registered {len(incoming)} types from {source}")

    def _validate(self, data: Any, source: str) -> SchemaDocument:
        try:
            return SchemaDocument.model_validate(data)
        except ValidationError as e:
            raise SchemaError(source, f"invalid schema document: {e.error_count()} validation errors") from e

    # -- references --------------------------------------------------------

    def ref(self, name: str) -> TypeRef:
        """TypeRef for a type name; names ending in '&' carry their element type."""
        if name.endswith(BY_REF_SUFFIX) and len(name) > len(BY_REF_SUFFIX):
            element = self.ref(name[: -len(BY_REF_SUFFIX)])
            return TypeRef(identity=name, name=name, element=element)
        return TypeRef(identity=name, name=name)

    def _optional_ref(self, name: Optional[str]) -> Optional[TypeRef]:
        return self.ref(name) if name else None

    def _parameter(self, parameter: SchemaParameter) -> ParameterDescriptor:
        type_ref = self._optional_ref(parameter.type)
        if type_ref is not None and parameter.modifier != "none" and not type_ref.is_by_ref:
            type_ref = self.ref(type_ref.name + BY_REF_SUFFIX)
        return ParameterDescriptor(
            name=parameter.name,
            type=type_ref,
            modifier=parameter.modifier,
            is_variadic=parameter.variadic,
        )

    def _schema_type(self, ref: TypeRef) -> Optional[SchemaType]:
        if not isinstance(ref.identity, str):
            return None
        schema_type = self._types.get(ref.identity)
        if schema_type is None:
            logger.debug(f"No schema entry for {ref.name}; treating it as opaque")
        return schema_type

    # -- MetadataProvider --------------------------------------------------

    def fields(self, ref: TypeRef) -> List[FieldDescriptor]:
        schema_type = self._schema_type(ref)
        if schema_type is None:
            return []
        return [FieldDescriptor(name=f.name, type=self._optional_ref(f.type)) for f in schema_type.fields]

    def properties(self, ref: TypeRef) -> List[PropertyDescriptor]:
        schema_type = self._schema_type(ref)
        if schema_type is None:
            return []
        return [PropertyDescriptor(name=p.name, type=self._optional_ref(p.type)) for p in schema_type.properties]

    def methods(self, ref: TypeRef) -> List[MethodDescriptor]:
        schema_type = self._schema_type(ref)
        if schema_type is None:
            return []
        return [
            MethodDescriptor(
                name=m.name,
                return_type=self._optional_ref(m.return_type),
                parameters=[self._parameter(p) for p in m.parameters],
                compiler_generated=m.compiler_generated,
            )
            for m in schema_type.methods
        ]

    def constructors(self, ref: TypeRef) -> List[ConstructorDescriptor]:
        schema_type = self._schema_type(ref)
        if schema_type is None:
            return []
        return [
            ConstructorDescriptor(parameters=[self._parameter(p) for p in c.parameters])
            for c in schema_type.constructors
        ]

    def events(self, ref: TypeRef) -> List[EventDescriptor]:
        schema_type = self._schema_type(ref)
        if schema_type is None:
            return []
        return [
            EventDescriptor(name=e.name, handler_type=self._optional_ref(e.handler_type))
            for e in schema_type.events
        ]

    def nested_types(self, ref: TypeRef) -> List[NestedTypeDescriptor]:
        schema_type = self._schema_type(ref)
        if schema_type is None:
            return []
        return [NestedTypeDescriptor(type=self.ref(name)) for name in schema_type.nested_types]

    # -- lookup strategies -------------------------------------------------

    def lookup(self, name: str) -> Optional[TypeRef]:
        if name in self._types:
            return self.ref(name)
        return None

    def search(self, name: str) -> Optional[TypeRef]:
        """Match on the short name (segment after the last '.' or '+')."""
        matches = [type_name for type_name in self._types if _short_name(type_name) == name]
        if len(matches) == 1:
            return self.ref(matches[0])
        if len(matches) > 1:
            logger.warning(f"Ambiguous type name '{name}': {', '.join(sorted(matches)[:5])}")
        return None

    def load_path(self, path: Path) -> bool:
        """Load a JSON document, or every ``*.json`` document in a directory."""
        path = Path(path).resolve()
        if path.is_dir():
            loaded = [self.load_path(child) for child in sorted(path.glob("*.json"))]
            return any(loaded)

        if not path.is_file() or path.suffix.lower() != ".json":
            return False
        if path in self._loaded_paths:
            return True

        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise SchemaError(str(path), f"invalid JSON: {e}") from e
        except UnicodeDecodeError as e:
            raise SchemaError(str(path), f"not valid UTF-8: {e}") from e
        except OSError as e:
            raise SchemaError(str(path), f"cannot read file: {e}") from e

        self.add_document(self._validate(data, str(path)), str(path))
        self._loaded_paths.add(path)
        return True
