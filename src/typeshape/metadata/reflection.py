"""Native Python reflection provider.

Maps live classes onto the six member categories:

- fields: the class's own annotations (plus un-annotated ``__slots__``)
- properties: ``property`` / ``functools.cached_property`` members
- methods: functions, static/class methods and builtin routines
- constructors: ``__new__`` / ``__init__`` (or the effective class signature)
- events: annotations typed as a ``Callable`` (callback slots)
- nested types: classes defined in the class body
"""

import builtins
import dataclasses
import functools
import importlib
import importlib.util
import inspect
import sys
import types
import typing
from collections.abc import Callable as AbcCallable
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from typeshape.exceptions import MetadataError
from typeshape.logging_config import logger
from .provider import MetadataProvider
from .schemas import (
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


_UNRESOLVED = object()

_CONSTRUCTOR_NAMES = ("__new__", "__init__")
_ANNOTATE_NAMES = ("__annotate__", "__annotate_func__")
_SLOT_EXCLUDES = ("__dict__", "__weakref__")
_MEMBERLESS_ORIGINS = (typing.Union, types.UnionType, typing.Literal)
_VARIADIC_KINDS = (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)
_BOUND_KINDS = (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)
_BUILTIN_ROUTINE_TYPES = (
    types.MethodDescriptorType,
    types.WrapperDescriptorType,
    types.ClassMethodDescriptorType,
)

# Methods each class generator synthesizes with exec, keyed by the generator's module.
_GENERATED_METHODS = {
    "dataclasses": frozenset({
        "__init__", "__repr__", "__eq__", "__lt__", "__le__", "__gt__", "__ge__",
        "__hash__", "__setattr__", "__delattr__", "__getstate__", "__setstate__", "__replace__",
    }),
    "collections": frozenset({"__repr__", "_make", "_replace", "_asdict", "__getnewargs__"}),
    "attr": frozenset({
        "__init__", "__attrs_init__", "__repr__", "__eq__", "__ne__", "__lt__", "__le__",
        "__gt__", "__ge__", "__hash__", "__setattr__", "__getstate__", "__setstate__",
    }),
}


def type_name(tp: Any) -> str:
    """Qualified display name for a class or typing construct."""
    if typing.get_origin(tp) is not None:
        return repr(tp)
    if inspect.isclass(tp):
        return f"{tp.__module__}.{tp.__qualname__}"
    return repr(tp)


def _is_alias(tp: Any) -> bool:
    return typing.get_origin(tp) is not None


def _is_type_like(obj: Any) -> bool:
    return _is_alias(obj) or inspect.isclass(obj)


def _is_callable_annotation(annotation: Any) -> bool:
    return (
        annotation is AbcCallable
        or annotation is typing.Callable
        or typing.get_origin(annotation) is AbcCallable
    )


def _is_forward(annotation: Any) -> bool:
    return isinstance(annotation, str) or isinstance(getattr(annotation, "__forward_arg__", None), str)


def _raw_signature(func: Any) -> Optional[inspect.Signature]:
    try:
        return inspect.signature(func)
    except NameError:
        # Deferred annotations (3.14+) that name something undefined.
        import annotationlib
        try:
            return inspect.signature(func, annotation_format=annotationlib.Format.FORWARDREF)
        except (ValueError, TypeError):
            return None
    except (ValueError, TypeError):
        return None


def _signature(func: Any) -> Optional[inspect.Signature]:
    """
    inspect.signature with evaluated annotations, or None for routines without one.

    If any annotation fails to evaluate, the unevaluated signature is returned
    and its string annotations are resolved one at a time by the caller.
    """
    try:
        return inspect.signature(func, eval_str=True)
    except Exception as e:
        logger.debug(f"No evaluated signature for {func!r}: {type(e).__name__}: {e}")
    return _raw_signature(func)


def _own_annotations(owner: type) -> Dict[str, Any]:
    try:
        return dict(inspect.get_annotations(owner))
    except NameError:
        import annotationlib
        return dict(annotationlib.get_annotations(owner, format=annotationlib.Format.FORWARDREF))


def _unwrap(annotation: Any) -> Any:
    """Strip ClassVar, Final, Annotated and InitVar down to the declared type."""
    while True:
        if isinstance(annotation, dataclasses.InitVar):
            annotation = annotation.type
            continue
        origin = typing.get_origin(annotation)
        if origin in (typing.ClassVar, typing.Final, typing.Annotated):
            args = typing.get_args(annotation)
            if not args:
                return _UNRESOLVED
            annotation = args[0]
            continue
        if annotation in (typing.ClassVar, typing.Final):
            return _UNRESOLVED
        return annotation


def _code_generator(owner: type) -> Optional[str]:
    """Module of the class generator that built ``owner``, if any."""
    if dataclasses.is_dataclass(owner):
        return "dataclasses"
    if hasattr(owner, "__attrs_attrs__"):
        return "attr"
    if issubclass(owner, tuple) and isinstance(getattr(owner, "_fields", None), tuple):
        return "collections"
    return None


def _is_generated(name: str, func: Any, owner: type) -> bool:
    """
    True for methods synthesized by a class generator rather than authored.

    dataclasses, namedtuple and attrs either build methods with exec (the
    code object's filename is a pseudo-name such as ``<string>``) or attach
    helpers defined in their own module. Only classes one of them built are
    considered, so authored methods of classes defined through exec or at
    the REPL stay visible. The compiler-emitted annotate function of
    3.14+ classes always counts.
    """
    if name in _ANNOTATE_NAMES:
        return True
    generator = _code_generator(owner)
    if generator is None:
        return False

    func = inspect.unwrap(func)
    module = getattr(func, "__module__", None) or ""
    if module == generator or module.startswith(generator + "."):
        return True
    code = getattr(func, "__code__", None)
    return code is not None and code.co_filename.startswith("<") and name in _GENERATED_METHODS[generator]


class ReflectionProvider(MetadataProvider):
    """Metadata provider backed by ``inspect`` and ``typing``."""

    kind = "reflection"

    def __init__(self, include_inherited: bool = False, expand_builtins: bool = False):
        """
        Args:
            include_inherited: Report members inherited through the MRO (``object`` excluded).
            expand_builtins: Describe types from the ``builtins`` module instead of
                treating them as opaque leaves.
        """
        self.include_inherited = include_inherited
        self.expand_builtins = expand_builtins

    # -- references --------------------------------------------------------

    def ref_for(self, annotation: Any) -> TypeRef:
        """Build a TypeRef for a class or typing construct."""
        if annotation is None:
            annotation = type(None)
        name = type_name(annotation)
        try:
            hash(annotation)
            identity = annotation
        except TypeError:
            identity = name
        return TypeRef(identity=identity, name=name)

    def _resolve(self, annotation: Any, globalns: Optional[dict], localns: Optional[dict]) -> Any:
        """Evaluate a string/forward annotation, then unwrap ClassVar, Final, Annotated, InitVar."""
        if annotation is inspect.Parameter.empty:
            return _UNRESOLVED
        if _is_forward(annotation):
            annotation = self._evaluate(annotation, globalns, localns)
            if annotation is _UNRESOLVED:
                return _UNRESOLVED
        return _unwrap(annotation)

    def _evaluate(self, annotation: Any, globalns: Optional[dict], localns: Optional[dict]) -> Any:
        """Evaluate one forward annotation through typing.get_type_hints on a holder class."""
        holder = type("_AnnotationHolder", (), {"__annotations__": {"annotation": annotation}})
        try:
            hints = typing.get_type_hints(holder, globalns=globalns or {}, localns=localns, include_extras=True)
        except Exception as e:
            logger.debug(f"Could not evaluate annotation {annotation!r}: {type(e).__name__}: {e}")
            return _UNRESOLVED
        return hints["annotation"]

    def _class_hints(self, owner: type) -> Dict[str, Any]:
        """Own annotations of ``owner`` evaluated by typing.get_type_hints; unresolvable ones map to _UNRESOLVED."""
        annotations = _own_annotations(owner)
        if not annotations:
            return {}
        try:
            hints = typing.get_type_hints(owner, include_extras=True)
        except Exception as e:
            # One bad annotation fails the whole class; resolve the rest one by one.
            logger.debug(f"Type hints of {type_name(owner)} failed with {type(e).__name__}: {e}")
            globalns, localns = self._namespaces(owner)
            return {name: self._resolve(annotation, globalns, localns) for name, annotation in annotations.items()}
        return {name: _unwrap(hints[name]) if name in hints else _UNRESOLVED for name in annotations}

    def _annotation_ref(self, annotation: Any, globalns: Optional[dict], localns: Optional[dict]) -> Optional[TypeRef]:
        resolved = self._resolve(annotation, globalns, localns)
        if resolved is _UNRESOLVED:
            return None
        return self.ref_for(resolved)

    def _namespaces(self, owner: type, func: Any = None) -> Tuple[dict, dict]:
        if func is not None:
            func = inspect.unwrap(func)
        if func is not None and hasattr(func, "__globals__"):
            globalns = func.__globals__
        else:
            module = sys.modules.get(owner.__module__)
            globalns = vars(module) if module is not None else {}
        localns = dict(vars(owner))
        localns.setdefault(owner.__name__, owner)
        return globalns, localns

    # -- class inspection --------------------------------------------------

    def _target(self, ref: TypeRef) -> Optional[type]:
        """The class whose members describe ``ref``, or None for memberless constructs."""
        tp = ref.identity
        origin = typing.get_origin(tp)
        if origin in _MEMBERLESS_ORIGINS:
            return None
        if origin is not None:
            tp = origin
        if not inspect.isclass(tp) or _is_alias(tp):
            return None
        if not self.expand_builtins and tp.__module__ == "builtins":
            return None
        return tp

    def _owners(self, cls: type) -> List[type]:
        if not self.include_inherited:
            return [cls]
        return [klass for klass in cls.__mro__ if klass is not object or cls is object]

    def _declared(self, cls: type) -> List[Tuple[str, Any, type]]:
        """(name, value, owner) for every class-dict entry, first declaration wins."""
        seen = set()
        members = []
        for owner in self._owners(cls):
            for name, value in vars(owner).items():
                if name in seen:
                    continue
                seen.add(name)
                members.append((name, value, owner))
        return members

    def _annotated(self, cls: type) -> List[Tuple[str, Any]]:
        """(name, evaluated hint) for every annotation, first declaration wins."""
        seen = set()
        entries = []
        for owner in self._owners(cls):
            for name, hint in self._class_hints(owner).items():
                if name in seen:
                    continue
                seen.add(name)
                entries.append((name, hint))
        return entries

    def _parameters(self, sig: inspect.Signature, drop_first: bool, globalns: dict, localns: dict) -> List[ParameterDescriptor]:
        params = list(sig.parameters.values())
        if drop_first and params and params[0].kind in _BOUND_KINDS:
            params = params[1:]
        return [
            ParameterDescriptor(
                name=p.name,
                type=self._annotation_ref(p.annotation, globalns, localns),
                is_variadic=p.kind in _VARIADIC_KINDS,
            )
            for p in params
        ]

    def _routine(self, value: Any) -> Optional[Tuple[Any, bool]]:
        """(function, drop_first) for method-like class attributes."""
        if isinstance(value, staticmethod):
            func = value.__func__
            return (func, False) if inspect.isroutine(func) else None
        if isinstance(value, classmethod):
            func = value.__func__
            return (func, True) if inspect.isroutine(func) else None
        if inspect.isfunction(value) or isinstance(value, _BUILTIN_ROUTINE_TYPES):
            return value, True
        if inspect.isbuiltin(value):
            return value, False
        return None

    # -- MetadataProvider --------------------------------------------------

    def fields(self, ref: TypeRef) -> List[FieldDescriptor]:
        cls = self._target(ref)
        if cls is None:
            return []

        result = []
        seen = set()
        for name, resolved in self._annotated(cls):
            seen.add(name)
            if resolved is not _UNRESOLVED and _is_callable_annotation(resolved):
                continue
            type_ref = None if resolved is _UNRESOLVED else self.ref_for(resolved)
            result.append(FieldDescriptor(name=name, type=type_ref))

        for owner in self._owners(cls):
            slots = vars(owner).get("__slots__", ())
            if isinstance(slots, str):
                slots = (slots,)
            for name in slots:
                if name in seen or name in _SLOT_EXCLUDES:
                    continue
                seen.add(name)
                result.append(FieldDescriptor(name=name, type=None))

        return result

    def properties(self, ref: TypeRef) -> List[PropertyDescriptor]:
        cls = self._target(ref)
        if cls is None:
            return []

        result = []
        for name, value, owner in self._declared(cls):
            if isinstance(value, property):
                getter = value.fget
            elif isinstance(value, functools.cached_property):
                getter = value.func
            else:
                continue

            type_ref = None
            sig = _signature(getter) if getter is not None else None
            if sig is not None:
                globalns, localns = self._namespaces(owner, getter)
                type_ref = self._annotation_ref(sig.return_annotation, globalns, localns)
            result.append(PropertyDescriptor(name=name, type=type_ref))
        return result

    def methods(self, ref: TypeRef) -> List[MethodDescriptor]:
        cls = self._target(ref)
        if cls is None:
            return []

        result = []
        for name, value, owner in self._declared(cls):
            if name in _CONSTRUCTOR_NAMES:
                continue
            routine = self._routine(value)
            if routine is None:
                continue
            func, drop_first = routine

            sig = _signature(func)
            if sig is None:
                logger.debug(f"No signature for {type_name(cls)}.{name}")
                result.append(MethodDescriptor(name=name, compiler_generated=_is_generated(name, func, owner)))
                continue

            globalns, localns = self._namespaces(owner, func)
            result.append(
                MethodDescriptor(
                    name=name,
                    return_type=self._annotation_ref(sig.return_annotation, globalns, localns),
                    parameters=self._parameters(sig, drop_first, globalns, localns),
                    compiler_generated=_is_generated(name, func, owner),
                )
            )
        return result

    def constructors(self, ref: TypeRef) -> List[ConstructorDescriptor]:
        cls = self._target(ref)
        if cls is None:
            return []

        result = []
        for name, value in vars(cls).items():
            if name not in _CONSTRUCTOR_NAMES:
                continue
            routine = self._routine(value)
            if routine is None:
                continue
            func, _ = routine
            sig = _signature(func)
            if sig is None:
                result.append(ConstructorDescriptor())
                continue
            globalns, localns = self._namespaces(cls, func)
            # __new__ receives cls, __init__ receives self
            result.append(ConstructorDescriptor(parameters=self._parameters(sig, True, globalns, localns)))

        if result:
            return result

        sig = _signature(cls)
        if sig is None:
            return []
        globalns, localns = self._namespaces(cls)
        return [ConstructorDescriptor(parameters=self._parameters(sig, False, globalns, localns))]

    def events(self, ref: TypeRef) -> List[EventDescriptor]:
        cls = self._target(ref)
        if cls is None:
            return []

        result = []
        for name, resolved in self._annotated(cls):
            if resolved is _UNRESOLVED or not _is_callable_annotation(resolved):
                continue
            result.append(EventDescriptor(name=name, handler_type=self.ref_for(resolved)))
        return result

    def nested_types(self, ref: TypeRef) -> List[NestedTypeDescriptor]:
        cls = self._target(ref)
        if cls is None:
            return []

        result = []
        for name, value, owner in self._declared(cls):
            if not inspect.isclass(value) or _is_alias(value):
                continue
            if getattr(value, "__qualname__", None) != f"{owner.__qualname__}.{name}":
                continue
            result.append(NestedTypeDescriptor(type=self.ref_for(value)))
        return result

    def describe(self, ref: TypeRef) -> TypeDescriptor:
        try:
            return super().describe(ref)
        except MetadataError:
            raise
        except Exception as e:
            raise MetadataError(ref.name, f"{type(e).__name__}: {e}") from e

    # -- lookup strategies -------------------------------------------------

    def lookup(self, name: str) -> Optional[TypeRef]:
        """Import ``module.Qualified.Name`` using the longest importable module prefix."""
        obj = self._import_dotted(name)
        if obj is None or not _is_type_like(obj):
            return None
        return self.ref_for(obj)

    def _import_dotted(self, name: str) -> Any:
        parts = name.split(".")
        if not all(parts):
            return None

        if len(parts) == 1:
            return getattr(builtins, name, None)

        for split in range(len(parts) - 1, 0, -1):
            module_name = ".".join(parts[:split])
            try:
                obj = importlib.import_module(module_name)
            except ImportError:
                continue
            except Exception as e:
                logger.debug(f"Importing {module_name} failed with {type(e).__name__}: {e}")
                continue
            try:
                for attr in parts[split:]:
                    obj = getattr(obj, attr)
            except AttributeError:
                continue
            return obj
        return None

    def search(self, name: str) -> Optional[TypeRef]:
        """Find a class among already-imported modules by qualified, dotted or short name."""
        matches: Dict[int, type] = {}
        for module_name, module in list(sys.modules.items()):
            if module is None:
                continue
            try:
                namespace = dict(vars(module))
            except TypeError:
                continue
            for value in namespace.values():
                if not inspect.isclass(value) or _is_alias(value):
                    continue
                if getattr(value, "__module__", None) != module_name:
                    continue
                found = self._match_class(value, name)
                if found is not None:
                    matches[id(found)] = found

        if len(matches) == 1:
            return self.ref_for(next(iter(matches.values())))
        if len(matches) > 1:
            candidates = sorted(type_name(c) for c in matches.values())
            logger.warning(f"Ambiguous type name '{name}': {', '.join(candidates[:5])}")
        return None

    def _match_class(self, cls: type, name: str) -> Optional[type]:
        if name in (type_name(cls), cls.__qualname__, cls.__name__):
            return cls
        head, _, rest = name.partition(".")
        if not rest or head != cls.__name__:
            return None
        obj: Any = cls
        for attr in rest.split("."):
            obj = vars(obj).get(attr) if inspect.isclass(obj) else None
            if obj is None:
                return None
        return obj if inspect.isclass(obj) else None

    def load_path(self, path: Path) -> bool:
        """Import a ``.py`` file or make a directory importable."""
        path = Path(path).resolve()
        if path.is_dir():
            if str(path) not in sys.path:
                sys.path.insert(0, str(path))
                importlib.invalidate_caches()
            logger.debug(f"Added {path} to sys.path")
            return True

        if not path.is_file() or path.suffix != ".py":
            logger.debug(f"Not a Python source file: {path}")
            return False

        for module in list(sys.modules.values()):
            module_file = getattr(module, "__file__", None)
            if module_file and Path(module_file).resolve() == path:
                return True

        module_name = path.stem
        if module_name in sys.modules:
            module_name = f"_typeshape_loaded_{path.stem}"

        spec = importlib.util.spec_from_file_location(module_name, path)
        if spec is None or spec.loader is None:
            return False

        module = importlib.util.module_from_spec(spec)
        sys.modules[module_name] = module
        parent = str(path.parent)
        if parent not in sys.path:
            sys.path.insert(0, parent)
        try:
            spec.loader.exec_module(module)
        except Exception as e:
            del sys.modules[module_name]
            raise MetadataError(str(path), f"import failed with {type(e).__name__}: {e}") from e

        logger.debug(f"Loaded {path} as module {module_name}")
        return True
