# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import json
from pathlib import Path

import pytest

from himark.annotations.parser import AnnotationKind
from himark.decl.loader import load_declaration, load_unit, load_unit_data
from himark.decl.model import DeclKind, GenericParamKind, TraitClass


def _unit() -> dict:
	return {
		"file": "src/lib.rs",
		"module": "tags",
		"registry": {"markers": ["ext::Tag"], "ordinary": ["Clone"]},
		"items": [
			{"kind": "trait", "name": "Array", "line": 7, "annotations": [{"name": "hi::marker", "args": ""}]},
			{
				"kind": "trait",
				"name": "Sized2",
				"line": 11,
				"items": [{"kind": "fn", "name": "size", "line": 12, "column": 5}],
				"supertraits": ["Array", {"path": "std::fmt::Debug", "class": "ordinary", "line": 11, "column": 15}],
				"annotations": ["marker"],
			},
			{
				"kind": "struct",
				"name": "TestAll",
				"line": 20,
				"generics": [{"name": "T", "bounds": ["Default"]}, {"name": "N", "kind": "const", "type": "usize"}],
				"where": [{"subject": "[T; N]", "bounds": ["Sized"]}],
				"annotations": [
					{"name": "derive", "args": "Debug"},
					{"name": "hi::mark", "args": "Array, V", "line": 19, "column": 10},
				],
			},
			{"kind": "enum", "name": "Plain"},
		],
		"mark_as": ["EmptyStruct as Array", {"args": "u8 as V", "line": 30}],
	}


def test_load_unit_data_builds_annotated_items() -> None:
	unit, diags = load_unit_data(_unit())
	assert diags == []
	assert unit.file == "src/lib.rs"
	assert [(i.decl.name, i.request.kind) for i in unit.items] == [
		("Array", AnnotationKind.VALIDATE),
		("Sized2", AnnotationKind.VALIDATE),
		("TestAll", AnnotationKind.GENERATE),
	]
	assert [t.name for t in unit.traits] == ["Array", "Sized2"]
	assert unit.registry.markers == ("ext::Tag",)
	assert unit.registry.auto_traits is None
	assert len(unit.mark_as) == 2
	assert unit.mark_as[1].span.line == 30


def test_loaded_declaration_shapes() -> None:
	unit, _ = load_unit_data(_unit())
	sized = unit.items[1].decl
	assert sized.kind is DeclKind.TRAIT_DEF
	assert sized.module == "tags"
	assert [str(i) for i in sized.body_items] == ["fn size"]
	assert sized.body_items[0].span.file == "src/lib.rs"
	assert [str(s) for s in sized.supertraits] == ["Array", "std::fmt::Debug"]
	assert sized.supertraits[0].classification is None
	assert sized.supertraits[1].classification is TraitClass.ORDINARY
	test_all = unit.items[2].decl
	assert [g.kind for g in test_all.generics] == [GenericParamKind.TYPE, GenericParamKind.CONST]
	assert str(test_all.where[0]) == "[T; N]: Sized"
	req = unit.items[2].request
	assert req.payload.payload == "Array, V"
	assert (req.payload.span.line, req.payload.span.column) == (19, 10)


def test_malformed_item_is_skipped_with_diagnostic() -> None:
	data = _unit()
	data["items"].insert(0, {"kind": "module", "name": "Nope", "line": 1, "annotations": ["mark"]})
	data["items"].append({"kind": "struct", "name": "Bad", "items": [{"name": "f"}], "annotations": ["mark"]})
	unit, diags = load_unit_data(data)
	assert [d.code for d in diags] == ["E-DECL-LOAD", "E-DECL-LOAD"]
	assert diags[0].span.line == 1
	assert "Nope" in diags[0].message
	assert [i.decl.name for i in unit.items] == ["Array", "Sized2", "TestAll"]


def test_invalid_supertrait_path_is_a_load_error() -> None:
	data = {"items": [{"kind": "trait", "name": "T", "supertraits": ["not a path"], "annotations": ["marker"]}]}
	unit, diags = load_unit_data(data, file="x.json")
	assert unit.items == []
	assert [d.code for d in diags] == ["E-DECL-LOAD"]
	assert diags[0].span.file == "x.json"


def test_lifetime_kind_is_inferred() -> None:
	decl = load_declaration({"kind": "struct", "name": "R", "generics": ["'a", "T"]})
	assert [g.kind for g in decl.generics] == [GenericParamKind.LIFETIME, GenericParamKind.TYPE]


def test_custom_annotation_names() -> None:
	data = {"items": [{"kind": "struct", "name": "S", "annotations": [{"name": "tag", "args": "A"}, "mark"]}]}
	names = {AnnotationKind.GENERATE: ("tag",), AnnotationKind.VALIDATE: ()}
	unit, _ = load_unit_data(data, annotation_names=names)
	assert len(unit.items) == 1
	assert unit.items[0].request.payload.payload == "A"


def test_load_unit_reports_bad_json(tmp_path: Path) -> None:
	path = tmp_path / "unit.json"
	path.write_text("{not json")
	unit, diags = load_unit(path)
	assert unit.items == []
	assert [d.code for d in diags] == ["E-DECL-LOAD"]
	assert diags[0].span.file == str(path)


def test_load_unit_from_file(tmp_path: Path) -> None:
	path = tmp_path / "unit.json"
	path.write_text(json.dumps({"items": [{"kind": "union", "name": "U", "annotations": ["mark"]}]}))
	unit, diags = load_unit(path)
	assert diags == []
	assert unit.file == str(path)
	assert unit.items[0].decl.kind is DeclKind.STRUCT_LIKE


@pytest.mark.parametrize(
	"data",
	[
		{"registry": ["Send"], "items": []},
		{"items": 5},
		{"mark_as": "Foo as Send"},
		{"registry": {"markers": "Array"}},
	],
)
def test_malformed_unit_shapes_become_diagnostics(data: dict) -> None:
	unit, diags = load_unit_data(data, file="unit.json")
	assert unit.items == []
	assert unit.mark_as == []
	assert [d.code for d in diags] == ["E-DECL-LOAD"]
	assert diags[0].span.file == "unit.json"


@pytest.mark.parametrize(
	"field, value",
	[
		("generics", 3),
		("where", {"subject": "T"}),
		("items", "fn len"),
		("supertraits", "Send"),
		("annotations", "marker"),
	],
)
def test_malformed_item_fields_skip_only_that_item(field: str, value: object) -> None:
	bad = {"kind": "trait", "name": "Bad", "line": 4, "annotations": ["marker"], field: value}
	good = {"kind": "struct", "name": "Good", "annotations": [{"name": "mark", "args": "Send"}]}
	unit, diags = load_unit_data({"items": [bad, good]})
	assert [i.decl.name for i in unit.items] == ["Good"]
	(diag,) = diags
	assert diag.code == "E-DECL-LOAD"
	assert f"'{field}' must be a list" in diag.message
	assert diag.span.line == 4


def test_unhashable_kind_values_are_load_errors() -> None:
	data = {
		"items": [
			{"kind": "struct", "name": "S", "generics": [{"name": "T", "kind": ["type"]}], "annotations": ["mark"]},
			{"kind": "trait", "name": "T", "supertraits": [{"path": "Send", "class": ["auto"]}], "annotations": ["marker"]},
		]
	}
	unit, diags = load_unit_data(data)
	assert unit.items == []
	assert [d.code for d in diags] == ["E-DECL-LOAD", "E-DECL-LOAD"]
