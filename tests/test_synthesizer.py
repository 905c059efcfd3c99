"""Tests for the synthesizer module."""

import ast

from routegen.collector import HandlerDescriptor, collect_operations
from routegen.references import ComponentReferenceProvider, EmptyReferenceProvider
from routegen.synthesizer import (
    RoutingKey,
    build_stubs,
    deduplicate_stub_names,
    describe_schema,
    synthesize_handlers,
)

_PROVIDER = ComponentReferenceProvider({"schemas": {"Pet": {"type": "object"}}})


def _functions(source: str) -> dict[str, ast.AsyncFunctionDef]:
    tree = ast.parse(source)
    return {node.name: node for node in tree.body if isinstance(node, ast.AsyncFunctionDef)}


class TestBuildStubs:
    def test_no_body_single_stub(self):
        hd = HandlerDescriptor("get_pet_by_id", "get", "/pets/:pet_id", ("pet_id",))
        stubs = build_stubs(hd, _PROVIDER)
        assert len(stubs) == 1
        assert stubs[0].name == "get_pet_by_id"
        assert stubs[0].routing_key == RoutingKey("/pets/:pet_id", "get")
        assert stubs[0].body is None

    def test_one_stub_per_content_type(self):
        body = {
            "required": True,
            "content": {
                "application/json": {"schema": {"$ref": "#/components/schemas/Pet"}},
                "application/xml": {"schema": {"type": "object"}},
            },
        }
        hd = HandlerDescriptor("add_pet", "post", "/pets", (), body)
        stubs = build_stubs(hd, _PROVIDER)
        assert [s.name for s in stubs] == ["add_pet_application_json", "add_pet_application_xml"]
        assert {s.routing_key for s in stubs} == {RoutingKey("/pets", "post")}
        assert all(s.body.required for s in stubs)
        assert stubs[0].body.schema_hint == "Pet"
        assert stubs[1].body.schema_hint == "object"

    def test_optional_body(self):
        hd = HandlerDescriptor("patch_pet", "put", "/pets", (), {"content": {"text/plain": {}}})
        (stub,) = build_stubs(hd, _PROVIDER)
        assert stub.body.required is False
        assert stub.body.schema_hint == "any"

    def test_body_without_content(self, caplog):
        hd = HandlerDescriptor("add_pet", "post", "/pets", (), {"content": {}})
        assert build_stubs(hd, _PROVIDER) == []
        assert "no content types" in caplog.text

    def test_malformed_content(self, caplog):
        hd = HandlerDescriptor("add_pet", "post", "/pets", (), {"content": "application/json"})
        assert build_stubs(hd, _PROVIDER) == []
        assert "malformed request body content" in caplog.text


class TestDescribeSchema:
    def test_unresolved_reference(self):
        hint = describe_schema({"$ref": "#/components/schemas/Pet"}, EmptyReferenceProvider())
        assert hint.startswith("unresolved")

    def test_title_preferred(self):
        assert describe_schema({"title": "NewPet", "type": "object"}, _PROVIDER) == "NewPet"


class TestDeduplicateStubNames:
    def test_collision_gets_method_suffix(self):
        stubs = build_stubs(HandlerDescriptor("pet", "get", "/a"), _PROVIDER)
        stubs += build_stubs(HandlerDescriptor("pet", "put", "/b"), _PROVIDER)
        names = [s.name for s in deduplicate_stub_names(stubs)]
        assert names == ["pet", "pet_put"]

    def test_repeated_collision_gets_counter(self):
        stubs = []
        for path in ("/a", "/b", "/c"):
            stubs += build_stubs(HandlerDescriptor("pet", "get", path), _PROVIDER)
        names = [s.name for s in deduplicate_stub_names(stubs)]
        assert len(set(names)) == 3
        assert names[0] == "pet"

    def test_unique_names_untouched(self):
        stubs = build_stubs(HandlerDescriptor("a", "get", "/a"), _PROVIDER)
        stubs += build_stubs(HandlerDescriptor("b", "get", "/b"), _PROVIDER)
        assert deduplicate_stub_names(stubs) == stubs


class TestSynthesizeHandlers:
    def test_routes_for_petstore_tag(self, petstore, petstore_provider):
        groups = collect_operations(petstore, petstore_provider)
        module = synthesize_handlers("pets", groups["pets"], petstore_provider)
        assert module.routes == [
            (RoutingKey("/pets", "get"), "list_pets"),
            (RoutingKey("/pets", "post"), "create_pets_application_json"),
            (RoutingKey("/pets/:pet_id", "get"), "show_pet_by_id"),
            (RoutingKey("/pets/:pet_id", "put"), "update_pet_application_json"),
            (RoutingKey("/pets/:pet_id", "put"), "update_pet_application_x_www_form_urlencoded"),
        ]

    def test_source_parses(self):
        descriptors = [
            HandlerDescriptor("get_pet_by_id", "get", "/pets/:pet_id", ("pet_id",), summary='Say "hi"\\'),
            HandlerDescriptor("add_pet", "post", "/pets", (), {"required": True, "content": {"application/json": {}}}),
        ]
        module = synthesize_handlers("pets", descriptors, _PROVIDER)
        functions = _functions(module.source)
        assert set(functions) == {"get_pet_by_id", "add_pet_application_json"}

    def test_signatures(self):
        descriptors = [
            HandlerDescriptor("get_owner", "get", "/s/:store_id/o/:owner", ("store_id", "owner")),
            HandlerDescriptor("put_pet", "put", "/p/:pet_id", ("pet_id",), {"content": {"application/json": {}}}),
            HandlerDescriptor("add_pet", "post", "/p", (), {"required": True, "content": {"application/json": {}}}),
        ]
        functions = _functions(synthesize_handlers("pets", descriptors, _PROVIDER).source)

        owner = functions["get_owner"]
        assert [a.arg for a in owner.args.args] == ["store_id", "owner"]
        assert all(ast.unparse(a.annotation) == "str" for a in owner.args.args)

        put = functions["put_pet_application_json"]
        assert [a.arg for a in put.args.args] == ["pet_id", "body"]
        assert ast.unparse(put.args.defaults[-1]) == "Body(default=None)"

        add = functions["add_pet_application_json"]
        assert [a.arg for a in add.args.args] == ["body"]
        assert ast.unparse(add.args.defaults[-1]) == "Body(...)"

    def test_body_import_only_when_needed(self):
        descriptors = [HandlerDescriptor("ping", "get", "/ping")]
        source = synthesize_handlers("misc", descriptors, _PROVIDER).source
        assert "Body" not in source
        assert _functions(source).keys() == {"ping"}

    def test_body_argument_avoids_path_params(self):
        descriptors = [
            HandlerDescriptor("upload", "post", "/u/:body", ("body",), {"content": {"application/json": {}}}),
            HandlerDescriptor("both", "post", "/b/:body/:body_", ("body", "body_"), {"content": {"text/plain": {}}}),
        ]
        functions = _functions(synthesize_handlers("uploads", descriptors, _PROVIDER).source)
        assert [a.arg for a in functions["upload_application_json"].args.args] == ["body", "body_"]
        assert [a.arg for a in functions["both_text_plain"].args.args] == ["body", "body_", "body__"]
