"""Tests for the native reflection metadata provider."""

import collections
import sys
import textwrap
import types
import typing

import pytest

from typeshape.metadata import ReflectionProvider, type_name
from typeshape.visitor import render_type

pytestmark = [pytest.mark.fast, pytest.mark.metadata]


@pytest.fixture
def provider():
    return ReflectionProvider()


@pytest.fixture
def exec_module(monkeypatch):
    """Builds an importable module from source run through exec."""
    def build(source, name="exec_shapes"):
        module = types.ModuleType(name)
        monkeypatch.setitem(sys.modules, name, module)
        exec(textwrap.dedent(source), module.__dict__)
        return module
    return build


def describe(provider, cls):
    return provider.describe(provider.ref_for(cls))


class TestReferences:

    def test_class_name(self, sample_types):
        assert type_name(sample_types.ShapeNode) == "sample_types.ShapeNode"
        assert type_name(sample_types.ShapeAccount.Entry) == "sample_types.ShapeAccount.Entry"
        assert type_name(int) == "builtins.int"

    def test_alias_name_and_identity(self, provider):
        ref = provider.ref_for(typing.List[int])

        assert ref.name == "typing.List[int]"
        assert ref.identity == typing.List[int]
        assert ref.identity != list

    def test_none_is_nonetype(self, provider):
        assert provider.ref_for(None).name == "builtins.NoneType"


class TestFields:

    def test_annotations_in_declaration_order(self, provider, sample_types):
        fields = describe(provider, sample_types.ShapeNode).fields

        assert [(f.name, f.type.name) for f in fields] == [
            ("label", "builtins.str"),
            ("parent", "sample_types.ShapeNode"),
        ]

    def test_classvar_unwrapped_and_callables_excluded(self, provider, sample_types):
        fields = describe(provider, sample_types.ShapeAccount).fields

        assert [(f.name, f.type.name) for f in fields] == [
            ("owner", "sample_types.ShapeLeaf"),
            ("registry", "builtins.int"),
        ]

    def test_dataclass_fields(self, provider, sample_types):
        fields = describe(provider, sample_types.ShapePoint).fields

        assert [f.name for f in fields] == ["x", "y", "tags"]
        assert fields[2].type.name == "typing.List[str]"

    def test_slots_without_annotations(self, provider, sample_types):
        fields = describe(provider, sample_types.ShapeSlotted).fields

        assert [f.name for f in fields] == ["alpha", "beta"]
        assert all(f.type is None for f in fields)

    def test_unresolvable_annotation(self, provider, sample_types):
        fields = describe(provider, sample_types.ShapeBroken).fields

        assert fields[0].name == "ghost"
        assert fields[0].type is None


class TestPropertiesAndMethods:

    def test_properties(self, provider, sample_types):
        properties = describe(provider, sample_types.ShapeAccount).properties

        assert [(p.name, p.type.name) for p in properties] == [
            ("balance", "builtins.int"),
            ("summary", "builtins.str"),
        ]

    def test_methods(self, provider, sample_types):
        methods = describe(provider, sample_types.ShapeAccount).methods

        assert [m.name for m in methods] == ["deposit", "currency", "empty", "audit"]

    def test_method_signature(self, provider, sample_types):
        deposit = describe(provider, sample_types.ShapeAccount).methods[0]

        assert deposit.return_type.name == "builtins.bool"
        assert [(p.name, p.type.name, p.is_variadic) for p in deposit.parameters] == [
            ("amount", "builtins.int", False),
            ("notes", "builtins.str", True),
        ]

    def test_static_and_class_methods_drop_no_real_parameters(self, provider, sample_types):
        methods = {m.name: m for m in describe(provider, sample_types.ShapeAccount).methods}

        assert methods["currency"].parameters == []
        assert methods["empty"].parameters == []
        assert methods["empty"].return_type.name == "sample_types.ShapeAccount"

    def test_missing_annotations_are_unknown(self, provider, sample_types):
        audit = describe(provider, sample_types.ShapeAccount).methods[3]

        assert audit.return_type is None
        assert audit.parameters[0].name == "entry"
        assert audit.parameters[0].type is None

    def test_dataclass_generated_methods_excluded(self, provider, sample_types):
        ref = provider.ref_for(sample_types.ShapePoint)
        names = [m.name for m in provider.describe(ref).methods]

        assert "norm" in names
        assert "__repr__" not in names
        assert "__eq__" not in names
        assert any(m.compiler_generated for m in provider.methods(ref))

    def test_none_return_annotation(self, provider, sample_types):
        base_method = describe(provider, sample_types.ShapeBase).methods[0]
        assert base_method.return_type.name == "builtins.NoneType"


class TestConstructorsEventsNested:

    def test_own_init(self, provider, sample_types):
        constructors = describe(provider, sample_types.ShapeAccount).constructors

        assert len(constructors) == 1
        assert [(p.name, p.type.name) for p in constructors[0].parameters] == [
            ("owner", "sample_types.ShapeLeaf"),
            ("balance", "builtins.int"),
        ]

    def test_generated_init_is_a_constructor(self, provider, sample_types):
        constructors = describe(provider, sample_types.ShapePoint).constructors

        assert [p.name for p in constructors[0].parameters] == ["x", "y", "tags"]

    def test_callable_annotation_is_an_event(self, provider, sample_types):
        events = describe(provider, sample_types.ShapeAccount).events

        assert [e.name for e in events] == ["on_change"]
        assert "Callable" in events[0].handler_type.name

    def test_nested_types(self, provider, sample_types):
        nested = describe(provider, sample_types.ShapeAccount).nested_types

        assert [n.type.name for n in nested] == ["sample_types.ShapeAccount.Entry"]

    def test_referenced_class_is_not_nested(self, provider, sample_types):
        assert describe(provider, sample_types.ShapeNode).nested_types == []


class TestOptions:

    def test_builtins_opaque_by_default(self, provider):
        descriptor = describe(provider, int)

        assert descriptor.methods == []
        assert descriptor.constructors == []

    def test_expand_builtins(self):
        descriptor = describe(ReflectionProvider(expand_builtins=True), int)

        assert "bit_length" in [m.name for m in descriptor.methods]

    def test_own_members_only_by_default(self, provider, sample_types):
        descriptor = describe(provider, sample_types.ShapeDerived)

        assert [f.name for f in descriptor.fields] == ["derived_value"]
        assert descriptor.methods == []

    def test_include_inherited(self, sample_types):
        descriptor = describe(ReflectionProvider(include_inherited=True), sample_types.ShapeDerived)

        assert [f.name for f in descriptor.fields] == ["derived_value", "base_value"]
        assert [m.name for m in descriptor.methods] == ["base_method"]

    def test_alias_described_through_origin(self):
        provider = ReflectionProvider(expand_builtins=True)
        descriptor = provider.describe(provider.ref_for(typing.List[int]))

        assert "append" in [m.name for m in descriptor.methods]

    def test_union_has_no_members(self, provider):
        descriptor = provider.describe(provider.ref_for(typing.Union[int, str]))

        assert descriptor.fields == []
        assert descriptor.methods == []


class TestLookup:

    def test_direct_dotted_name(self, provider):
        assert provider.lookup("collections.OrderedDict").identity is collections.OrderedDict

    def test_direct_nested_name(self, provider, sample_types):
        ref = provider.lookup("sample_types.ShapeAccount.Entry")
        assert ref.identity is sample_types.ShapeAccount.Entry

    def test_bare_builtin(self, provider):
        assert provider.lookup("int").identity is int

    def test_direct_misses(self, provider):
        assert provider.lookup("no_such_module.Thing") is None
        assert provider.lookup("collections.NoSuchThing") is None
        assert provider.lookup("collections.abc") is None

    def test_search_imported_modules(self, provider, sample_types):
        assert provider.search("ShapeAccount").identity is sample_types.ShapeAccount
        assert provider.search("ShapeAccount.Entry").identity is sample_types.ShapeAccount.Entry
        assert provider.search("NoSuchShapeAnywhere") is None

    def test_load_path_file(self, provider, temp_dir):
        source = temp_dir / "loaded_shapes.py"
        source.write_text("class LoadedShapeGizmo:\n    size: int\n", encoding="utf-8")

        assert provider.search("LoadedShapeGizmo") is None
        assert provider.load_path(source)
        assert provider.search("LoadedShapeGizmo").name == "loaded_shapes.LoadedShapeGizmo"

    def test_load_path_directory(self, provider, temp_dir):
        (temp_dir / "dir_shapes.py").write_text("class DirShapeWidget:\n    pass\n", encoding="utf-8")

        assert provider.load_path(temp_dir)
        assert provider.lookup("dir_shapes.DirShapeWidget").name == "dir_shapes.DirShapeWidget"

    def test_load_path_rejects_other_files(self, provider, temp_dir):
        path = temp_dir / "notes.txt"
        path.write_text("hello", encoding="utf-8")
        assert provider.load_path(path) is False

    def test_load_path_import_failure(self, provider, temp_dir):
        from typeshape.exceptions import MetadataError

        source = temp_dir / "explodes_on_import.py"
        source.write_text("raise RuntimeError('boom')\n", encoding="utf-8")

        with pytest.raises(MetadataError):
            provider.load_path(source)


class TestAnnotationEvaluation:

    def test_unresolvable_annotation_keeps_its_siblings(self, provider, exec_module):
        module = exec_module('''
            class Partial:
                good: "int"
                ghost: "NowhereDefined"
        ''')

        fields = describe(provider, module.Partial).fields

        assert [(f.name, f.type.name if f.type else None) for f in fields] == [
            ("good", "builtins.int"),
            ("ghost", None),
        ]

    def test_nested_class_refers_to_itself(self, provider, exec_module):
        module = exec_module('''
            class Outer:
                class Link:
                    next: "Link"
        ''')

        fields = describe(provider, module.Outer.Link).fields

        assert fields[0].type.name == "exec_shapes.Outer.Link"

    def test_unresolvable_parameter_keeps_its_siblings(self, provider, exec_module):
        module = exec_module('''
            class Service:
                def run(self, count: "int", target: "NowhereDefined") -> "str":
                    pass
        ''')

        run = describe(provider, module.Service).methods[0]

        assert run.return_type.name == "builtins.str"
        assert run.parameters[0].type.name == "builtins.int"
        assert run.parameters[1].type is None

    def test_annotated_and_classvar_unwrapped(self, provider, exec_module):
        module = exec_module('''
            from typing import Annotated, ClassVar

            class Tagged:
                size: Annotated[int, "units"]
                shared: "ClassVar[str]"
        ''')

        fields = describe(provider, module.Tagged).fields

        assert [(f.name, f.type.name) for f in fields] == [
            ("size", "builtins.int"),
            ("shared", "builtins.str"),
        ]


class TestGeneratedMethodDetection:

    def test_methods_of_exec_defined_class_are_authored(self, provider, exec_module):
        module = exec_module('''
            class Svc:
                def run(self, x: int) -> int:
                    return x
        ''')

        methods = provider.methods(provider.ref_for(module.Svc))

        assert [m.name for m in methods if not m.compiler_generated] == ["run"]
        assert "Type exec_shapes.Svc Has 1 Methods" in render_type(module.Svc).splitlines()

    def test_exec_defined_dataclass_keeps_authored_methods(self, provider, exec_module):
        module = exec_module('''
            from dataclasses import dataclass

            @dataclass
            class Spot:
                x: int

                def area(self) -> int:
                    return self.x
        ''')
        ref = provider.ref_for(module.Spot)

        assert [m.name for m in provider.describe(ref).methods] == ["area"]
        generated = {m.name for m in provider.methods(ref) if m.compiler_generated}
        assert {"__repr__", "__eq__"} <= generated

    def test_namedtuple_helpers_are_generated(self, provider):
        Pair = collections.namedtuple("Pair", ["left", "right"])

        assert provider.describe(provider.ref_for(Pair)).methods == []

    def test_plain_class_dunders_are_authored(self, provider, sample_types):
        names = [m.name for m in provider.methods(provider.ref_for(sample_types.ShapeAccount)) if m.compiler_generated]

        assert set(names) <= {"__annotate__", "__annotate_func__"}
