"""Tests for declaration set merging."""

from tool_forge.core.declarations import ToolDeclaration, parse_declaration_set
from tool_forge.core.merge import merge_declaration_sets, merge_declarations, merge_tools_ref
from tool_forge.core.tools_ref import ToolsRef


def _decl(key, **raw):
    return ToolDeclaration.from_raw(key, raw)


class TestMergeToolsRef:
    def test_both_absent(self):
        assert merge_tools_ref(None, None) is None

    def test_one_side_absent(self):
        ref = ToolsRef.parse("a")
        assert merge_tools_ref(ref, None) is ref
        assert merge_tools_ref(None, ref) is ref

    def test_string_union_keeps_first_seen_order(self):
        merged = merge_tools_ref(ToolsRef.parse("a, b"), ToolsRef.parse("b, c"))
        assert merged.names() == ["a", "b", "c"]
        assert merged.to_wire() == "a, b, c"

    def test_string_union_is_symmetric_as_a_set(self):
        x, y = ToolsRef.parse("a, b"), ToolsRef.parse("c, a")
        assert set(merge_tools_ref(x, y).names()) == set(merge_tools_ref(y, x).names())

    def test_mapping_merge_entry_wise(self):
        base = ToolsRef.parse({"think": {"description": "Reason", "prompt": "Slowly"}})
        overlay = ToolsRef.parse({"think": {"description": "Reflect"}, "lint": "Run"})
        merged = merge_tools_ref(base, overlay)
        assert merged.to_wire() == {
            "think": {"description": "Reflect", "prompt": "Slowly"},
            "lint": {"description": "Run"},
        }

    def test_mixed_forms_become_mapping(self):
        merged = merge_tools_ref(ToolsRef.parse("a, b"), ToolsRef.parse({"b": "Bee"}))
        assert not merged.compact
        assert merged.names() == ["a", "b"]
        assert merged.entries["b"].description == "Bee"
        assert merged.entries["a"].optional is False

    def test_inputs_not_modified(self):
        base = ToolsRef.parse({"a": "A"})
        overlay = ToolsRef.parse({"a": "B"})
        merge_tools_ref(base, overlay)
        assert base.entries["a"].description == "A"


class TestMergeDeclarations:
    def test_overlay_scalars_win(self):
        merged = merge_declarations(
            _decl("t", description="Old", prompt="Keep"),
            _decl("t", description="New"),
        )
        assert merged.description == "New"
        assert merged.prompt == "Keep"

    def test_parameters_replaced_wholesale(self):
        merged = merge_declarations(
            _decl("t", parameters={"a": {"type": "string"}, "b": {"type": "number"}}),
            _decl("t", parameters={"c": {"type": "boolean"}}),
        )
        assert list(merged.parameters) == ["c"]

    def test_tools_accumulate(self):
        merged = merge_declarations(_decl("t", tools="a, b"), _decl("t", tools="b, c"))
        assert merged.tools.names() == ["a", "b", "c"]

    def test_absent_overlay_fields_do_not_clear(self):
        merged = merge_declarations(_decl("t", tools="a", toolMode="sequential"), _decl("t", prompt="P"))
        assert merged.tools.names() == ["a"]
        assert merged.tool_mode == "sequential"

    def test_disabled_flag_overrides(self):
        merged = merge_declarations(_decl("t", prompt="P"), _decl("t", disabled=True))
        assert not merged.is_enabled


class TestMergeDeclarationSets:
    def test_union_of_keys(self):
        base = parse_declaration_set({"a": {"prompt": "A"}})
        merged = merge_declaration_sets(base, parse_declaration_set({"b": {"prompt": "B"}}))
        assert set(merged) == {"a", "b"}

    def test_base_is_mutated_and_returned(self):
        base = parse_declaration_set({"a": {"prompt": "A"}})
        merged = merge_declaration_sets(base, parse_declaration_set({"a": {"prompt": "Z"}}))
        assert merged is base
        assert base["a"].prompt == "Z"

    def test_order_matters_for_scalars(self):
        x = {"t": {"description": "X"}}
        y = {"t": {"description": "Y"}}
        xy = merge_declaration_sets(parse_declaration_set(x), parse_declaration_set(y))
        yx = merge_declaration_sets(parse_declaration_set(y), parse_declaration_set(x))
        assert xy["t"].description == "Y"
        assert yx["t"].description == "X"

    def test_identity_with_empty_overlay(self, declarations):
        before = {k: v.model_dump() for k, v in declarations.items()}
        merge_declaration_sets(declarations, {})
        assert {k: v.model_dump() for k, v in declarations.items()} == before

    def test_overlay_declaration_not_shared_with_later_merges(self):
        overlay = parse_declaration_set({"t": {"tools": "a"}})
        merged = merge_declaration_sets({}, overlay)
        merge_declaration_sets(merged, parse_declaration_set({"t": {"tools": "b"}}))
        assert overlay["t"].tools.names() == ["a"]


class TestToolRecordMerge:
    def test_record_fields_overlay(self):
        merged = merge_tools_ref(
            ToolsRef.parse({"a": "desc-a"}),
            ToolsRef.parse({"a": {"description": "desc-a2", "optional": True}}),
        )
        assert merged.to_wire() == {"a": {"description": "desc-a2", "optional": True}}


class TestBlankToolsRef:
    def test_empty_string_counts_as_absent(self):
        merged = merge_tools_ref(ToolsRef.parse(""), ToolsRef.parse("a"))
        assert merged.to_wire() == "a"

    def test_empty_overlay_keeps_base(self):
        assert merge_tools_ref(ToolsRef.parse("a, b"), ToolsRef.parse("")).to_wire() == "a, b"

    def test_both_empty(self):
        assert merge_tools_ref(ToolsRef.parse(""), ToolsRef.parse("")) is None
