"""Tests for the JSON schema metadata provider."""

import json

import pytest

from typeshape.exceptions import MetadataError, SchemaError
from typeshape.metadata import SchemaProvider

pytestmark = [pytest.mark.fast, pytest.mark.metadata]


@pytest.fixture
def provider(sample_schema):
    return SchemaProvider.from_dict(sample_schema)


class TestDescribe:

    def test_members_in_document_order(self, provider):
        descriptor = provider.describe(provider.ref("Demo.Pair"))

        assert [f.name for f in descriptor.fields] == ["left", "right"]
        assert [f.type.name for f in descriptor.fields] == ["Demo.Left", "Demo.Right"]

    def test_all_categories(self, provider):
        descriptor = provider.describe(provider.ref("Demo.Account"))

        assert descriptor.properties[0].type.name == "Demo.Person"
        assert descriptor.events[0].handler_type.name == "System.EventHandler"
        assert [len(c.parameters) for c in descriptor.constructors] == [0, 1]
        assert descriptor.nested_types[0].type.name == "Demo.Account+Entry"

    def test_generated_methods_dropped_by_describe(self, provider):
        ref = provider.ref("Demo.Account")

        assert [m.name for m in provider.methods(ref)] == ["TryGet", "get_Owner"]
        assert [m.name for m in provider.describe(ref).methods] == ["TryGet"]

    def test_undescribed_type_is_opaque(self, provider):
        descriptor = provider.describe(provider.ref("System.Int32"))

        assert descriptor.fields == []
        assert descriptor.methods == []
        assert descriptor.nested_types == []


class TestByReference:

    def test_suffix_sets_element(self, provider):
        ref = provider.ref("System.Int32&")

        assert ref.is_by_ref
        assert ref.display_name == "System.Int32"
        assert ref.dereference().identity == "System.Int32"

    def test_plain_type(self, provider):
        ref = provider.ref("System.Int32")

        assert not ref.is_by_ref
        assert ref.dereference() is ref

    def test_modifier_forces_by_ref(self):
        provider = SchemaProvider.from_dict({
            "types": [{
                "name": "Demo.Parser",
                "methods": [{
                    "name": "TryParse",
                    "return_type": "System.Boolean",
                    "parameters": [
                        {"name": "text", "type": "System.String"},
                        {"name": "result", "type": "System.Int32", "modifier": "out"},
                    ],
                }],
            }]
        })

        text, result = provider.methods(provider.ref("Demo.Parser"))[0].parameters

        assert not text.type.is_by_ref
        assert result.modifier == "out"
        assert result.type.name == "System.Int32&"
        assert result.type.dereference().name == "System.Int32"


class TestLookup:

    def test_direct(self, provider):
        assert provider.lookup("Demo.Account").name == "Demo.Account"
        assert provider.lookup("Account") is None

    def test_search_by_short_name(self, provider):
        assert provider.search("Account").name == "Demo.Account"
        assert provider.search("Entry").name == "Demo.Account+Entry"
        assert provider.search("Missing") is None

    def test_ambiguous_search(self):
        provider = SchemaProvider.from_dict({"types": [{"name": "A.Item"}, {"name": "B.Item"}]})
        assert provider.search("Item") is None


class TestLoading:

    def test_from_file(self, sample_schema_path):
        provider = SchemaProvider.from_file(sample_schema_path)
        assert "Demo.Account" in provider.type_names

    def test_load_directory_merges_documents(self, temp_dir):
        (temp_dir / "a.json").write_text(json.dumps({"types": [{"name": "A.One"}]}), encoding="utf-8")
        (temp_dir / "b.json").write_text(json.dumps({"types": [{"name": "B.Two"}]}), encoding="utf-8")
        (temp_dir / "notes.txt").write_text("ignored", encoding="utf-8")
        provider = SchemaProvider()

        assert provider.load_path(temp_dir)
        assert sorted(provider.type_names) == ["A.One", "B.Two"]

    def test_reloading_same_file_is_a_no_op(self, sample_schema_path):
        provider = SchemaProvider.from_file(sample_schema_path)
        assert provider.load_path(sample_schema_path)

    def test_non_json_path(self, temp_dir):
        path = temp_dir / "types.py"
        path.write_text("x = 1\n", encoding="utf-8")
        assert SchemaProvider().load_path(path) is False

    def test_invalid_json(self, temp_dir):
        path = temp_dir / "broken.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(SchemaError):
            SchemaProvider().load_path(path)

    def test_not_utf8(self, temp_dir):
        path = temp_dir / "latin.json"
        path.write_bytes(b'{"types": [{"name": "\xff\xfe"}]}')

        with pytest.raises(SchemaError) as exc_info:
            SchemaProvider().load_path(path)

        assert "UTF-8" in str(exc_info.value)

    def test_invalid_document(self):
        with pytest.raises(SchemaError):
            SchemaProvider.from_dict({"types": [{"fields": []}]})

    def test_invalid_modifier(self):
        with pytest.raises(SchemaError):
            SchemaProvider.from_dict({
                "types": [{"name": "A", "methods": [{"name": "m", "parameters": [{"name": "p", "modifier": "inout"}]}]}]
            })

    def test_duplicate_type_names(self, sample_schema):
        provider = SchemaProvider.from_dict(sample_schema)
        with pytest.raises(SchemaError) as exc_info:
            provider.add_document(provider._validate({"types": [{"name": "Demo.Pair"}, {"name": "Fresh"}]}, "<dup>"))

        assert "Demo.Pair" in str(exc_info.value)
        assert "Fresh" not in provider.type_names

    def test_schema_error_is_metadata_error(self):
        with pytest.raises(MetadataError):
            SchemaProvider.from_dict({"types": [{"name": "A"}, {"name": "A"}]})

    def test_from_file_without_document(self, temp_dir):
        with pytest.raises(SchemaError):
            SchemaProvider.from_file(temp_dir / "missing.json")
