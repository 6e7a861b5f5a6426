# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Front-end adapter: load a declaration unit from its JSON form.

The host compiler parses source text; it hands the engine a serialized unit:

	{
	  "file": "src/lib.rs",
	  "module": "tags",
	  "registry": {"markers": [...], "ordinary": [...]},
	  "items": [
	    {
	      "kind": "struct" | "enum" | "union" | "trait",
	      "name": "Foo", "line": 3, "column": 1,
	      "generics": [{"name": "T", "bounds": ["Default"]},
	                   {"name": "N", "kind": "const", "type": "usize"}],
	      "where": [{"subject": "[T; N]", "bounds": ["Sized"]}],
	      "items": [{"kind": "fn", "name": "len", "line": 4}],
	      "supertraits": ["Send", {"path": "Tag", "class": "marker"}],
	      "annotations": [{"name": "hi::mark", "args": "Array, V", "line": 2, "column": 9}]
	    }
	  ],
	  "mark_as": [{"args": "Foo<u8> as Array", "line": 20, "column": 10}]
	}

A malformed item produces a load diagnostic and is skipped; the rest of the
unit still loads.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from himark.annotations.parser import (
	DEFAULT_ANNOTATION_NAMES,
	AnnotationKind,
	RawAnnotation,
	classify_annotation,
	parse_trait_list,
)
from himark.core.diagnostics import Diagnostic
from himark.core.span import Span
from himark.decl.model import (
	AssocItem,
	DeclKind,
	Declaration,
	GenericParam,
	GenericParamKind,
	TraitClass,
	TraitReference,
	WherePredicate,
)
from himark.engine import AnnotatedItem, AnnotationRequest
from himark.errors import DeclLoadError, HimarkError
from himark.report import diagnostic_from_error

_DECL_KINDS: Dict[str, DeclKind] = {
	"struct": DeclKind.STRUCT_LIKE,
	"enum": DeclKind.STRUCT_LIKE,
	"union": DeclKind.STRUCT_LIKE,
	"trait": DeclKind.TRAIT_DEF,
}

_PARAM_KINDS: Dict[str, GenericParamKind] = {
	"type": GenericParamKind.TYPE,
	"const": GenericParamKind.CONST,
	"lifetime": GenericParamKind.LIFETIME,
}

_TRAIT_CLASSES: Dict[str, TraitClass] = {
	"marker": TraitClass.USER_MARKER,
	"user_marker": TraitClass.USER_MARKER,
	"auto": TraitClass.COMPILER_AUTO,
	"compiler_auto": TraitClass.COMPILER_AUTO,
	"ordinary": TraitClass.ORDINARY,
	"unresolved": TraitClass.UNRESOLVED,
}

_ASSOC_KINDS = ("fn", "const", "type")


@dataclass(frozen=True)
class RegistryHints:
	"""Registry entries the host attached to the unit."""

	markers: Tuple[str, ...] = ()
	ordinary: Tuple[str, ...] = ()
	auto_traits: Optional[Tuple[str, ...]] = None


@dataclass
class DeclUnit:
	file: Optional[str] = None
	items: List[AnnotatedItem] = field(default_factory=list)
	# Every trait defined in the unit, annotated or not.
	traits: List[Declaration] = field(default_factory=list)
	mark_as: List[RawAnnotation] = field(default_factory=list)
	registry: RegistryHints = field(default_factory=RegistryHints)


def _span(obj: Mapping[str, Any], file: Optional[str]) -> Span:
	return Span(file=file, line=obj.get("line"), column=obj.get("column"))


def _str_list(obj: Mapping[str, Any], key: str, *, where: str, loc: Span) -> Tuple[str, ...]:
	raw = obj.get(key, [])
	if not isinstance(raw, list) or not all(isinstance(x, str) for x in raw):
		raise DeclLoadError(f"{where}: '{key}' must be a list of strings", loc=loc)
	return tuple(raw)


def _list_field(obj: Mapping[str, Any], key: str, *, where: str, loc: Span) -> List[Any]:
	raw = obj.get(key, [])
	if not isinstance(raw, list):
		raise DeclLoadError(f"{where}: '{key}' must be a list", loc=loc)
	return raw


def _require_str(obj: Mapping[str, Any], key: str, *, where: str, loc: Span) -> str:
	val = obj.get(key)
	if not isinstance(val, str) or not val:
		raise DeclLoadError(f"{where}: missing or invalid '{key}'", loc=loc)
	return val


def _load_generic(obj: Any, file: Optional[str], owner: str) -> GenericParam:
	if isinstance(obj, str):
		obj = {"name": obj}
	if not isinstance(obj, dict):
		raise DeclLoadError(f"generic parameter of '{owner}' must be an object or a name")
	loc = _span(obj, file)
	name = _require_str(obj, "name", where=f"generic parameter of '{owner}'", loc=loc)
	kind_name = obj.get("kind") or ("lifetime" if name.startswith("'") else "type")
	kind = _PARAM_KINDS.get(kind_name) if isinstance(kind_name, str) else None
	if kind is None:
		raise DeclLoadError(f"unknown generic parameter kind '{kind_name}'", loc=loc)
	try:
		return GenericParam(
			name=name,
			kind=kind,
			bounds=_str_list(obj, "bounds", where=f"generic parameter '{name}'", loc=loc),
			const_type=obj.get("type"),
			span=loc,
		)
	except ValueError as err:
		raise DeclLoadError(str(err), loc=loc) from err


def _load_where(obj: Any, file: Optional[str], owner: str) -> WherePredicate:
	if not isinstance(obj, dict):
		raise DeclLoadError(f"where predicate of '{owner}' must be an object")
	loc = _span(obj, file)
	subject = _require_str(obj, "subject", where=f"where predicate of '{owner}'", loc=loc)
	bounds = _str_list(obj, "bounds", where=f"where predicate '{subject}'", loc=loc)
	if not bounds:
		raise DeclLoadError(f"where predicate '{subject}' has no bounds", loc=loc)
	return WherePredicate(subject=subject, bounds=bounds, span=loc)


def _load_assoc(obj: Any, file: Optional[str], owner: str) -> AssocItem:
	if not isinstance(obj, dict):
		raise DeclLoadError(f"associated item of '{owner}' must be an object")
	loc = _span(obj, file)
	kind = obj.get("kind", "fn")
	if kind not in _ASSOC_KINDS:
		raise DeclLoadError(f"unknown associated item kind '{kind}'", loc=loc)
	name = _require_str(obj, "name", where=f"associated item of '{owner}'", loc=loc)
	return AssocItem(kind=kind, name=name, span=loc)


def _load_supertrait(obj: Any, file: Optional[str], owner: str) -> TraitReference:
	if isinstance(obj, str):
		obj = {"path": obj}
	if not isinstance(obj, dict):
		raise DeclLoadError(f"supertrait of '{owner}' must be an object or a path")
	loc = _span(obj, file)
	text = _require_str(obj, "path", where=f"supertrait of '{owner}'", loc=loc)
	try:
		parsed = parse_trait_list(RawAnnotation(payload=text, span=loc)).traits
	except HimarkError as err:
		raise DeclLoadError(f"invalid supertrait path '{text}' on '{owner}'", loc=loc) from err
	if len(parsed) != 1:
		raise DeclLoadError(f"invalid supertrait path '{text}' on '{owner}'", loc=loc)
	cls: Optional[TraitClass] = None
	if obj.get("class") is not None:
		cls = _TRAIT_CLASSES.get(obj["class"]) if isinstance(obj["class"], str) else None
		if cls is None:
			raise DeclLoadError(f"unknown trait classification '{obj['class']}'", loc=loc)
	return TraitReference(path=parsed[0].path, classification=cls, span=loc)


def load_declaration(obj: Any, *, file: Optional[str] = None, module: Optional[str] = None) -> Declaration:
	if not isinstance(obj, dict):
		raise DeclLoadError("declaration must be an object", loc=Span(file=file))
	loc = _span(obj, file)
	name = _require_str(obj, "name", where="declaration", loc=loc)
	kind_name = obj.get("kind")
	kind = _DECL_KINDS.get(kind_name) if isinstance(kind_name, str) else None
	if kind is None:
		raise DeclLoadError(f"declaration '{name}': unknown kind {kind_name!r}", loc=loc)
	owner = f"declaration '{name}'"
	generics = tuple(_load_generic(g, file, name) for g in _list_field(obj, "generics", where=owner, loc=loc))
	where = tuple(_load_where(w, file, name) for w in _list_field(obj, "where", where=owner, loc=loc))
	body: Tuple[AssocItem, ...] = ()
	supers: Tuple[TraitReference, ...] = ()
	if kind is DeclKind.TRAIT_DEF:
		body = tuple(_load_assoc(i, file, name) for i in _list_field(obj, "items", where=owner, loc=loc))
		supers = tuple(_load_supertrait(s, file, name) for s in _list_field(obj, "supertraits", where=owner, loc=loc))
	elif obj.get("items") or obj.get("supertraits"):
		raise DeclLoadError(f"declaration '{name}': only traits may list items or supertraits", loc=loc)
	try:
		return Declaration(
			kind=kind,
			name=name,
			generics=generics,
			where=where,
			body_items=body,
			supertraits=supers,
			span=loc,
			module=obj.get("module", module),
		)
	except ValueError as err:
		raise DeclLoadError(str(err), loc=loc) from err


def _load_annotations(
	obj: Mapping[str, Any],
	file: Optional[str],
	names: Mapping[AnnotationKind, Iterable[str]],
) -> List[AnnotationRequest]:
	out: List[AnnotationRequest] = []
	for ann in _list_field(obj, "annotations", where="declaration", loc=_span(obj, file)):
		if isinstance(ann, str):
			ann = {"name": ann}
		if not isinstance(ann, dict) or not isinstance(ann.get("name"), str):
			raise DeclLoadError("annotation must be an object with a 'name'", loc=_span(obj, file))
		kind = classify_annotation(ann["name"], names=names)
		if kind is None:
			continue
		args = ann.get("args", "")
		if not isinstance(args, str):
			raise DeclLoadError(f"annotation '{ann['name']}': 'args' must be a string", loc=_span(ann, file))
		out.append(AnnotationRequest(kind=kind, payload=RawAnnotation(payload=args, span=_span(ann, file))))
	return out


def load_unit_data(
	data: Any,
	*,
	file: Optional[str] = None,
	annotation_names: Mapping[AnnotationKind, Iterable[str]] | None = None,
) -> Tuple[DeclUnit, List[Diagnostic]]:
	"""Build a DeclUnit from decoded JSON; malformed items become diagnostics."""
	names = annotation_names if annotation_names is not None else DEFAULT_ANNOTATION_NAMES
	diagnostics: List[Diagnostic] = []
	if not isinstance(data, dict):
		err = DeclLoadError("declaration unit must be a JSON object", loc=Span(file=file))
		return DeclUnit(file=file), [diagnostic_from_error(err)]
	if isinstance(data.get("file"), str) and data["file"]:
		file = data["file"]
	unit = DeclUnit(file=file)
	unit_loc = Span(file=file)

	def unit_list(key: str) -> List[Any]:
		try:
			return _list_field(data, key, where="declaration unit", loc=unit_loc)
		except DeclLoadError as err:
			diagnostics.append(diagnostic_from_error(err))
			return []

	reg = data.get("registry") or {}
	try:
		if not isinstance(reg, dict):
			raise DeclLoadError("registry: must be a JSON object", loc=unit_loc)
		unit.registry = RegistryHints(
			markers=_str_list(reg, "markers", where="registry", loc=unit_loc),
			ordinary=_str_list(reg, "ordinary", where="registry", loc=unit_loc),
			auto_traits=_str_list(reg, "auto_traits", where="registry", loc=unit_loc) if reg.get("auto_traits") is not None else None,
		)
	except DeclLoadError as err:
		diagnostics.append(diagnostic_from_error(err))
	module = data.get("module") if isinstance(data.get("module"), str) else None
	for obj in unit_list("items"):
		try:
			decl = load_declaration(obj, file=file, module=module)
			requests = _load_annotations(obj, file, names)
		except DeclLoadError as err:
			diagnostics.append(diagnostic_from_error(err))
			continue
		if decl.kind is DeclKind.TRAIT_DEF:
			unit.traits.append(decl)
		unit.items.extend(AnnotatedItem(decl=decl, request=req) for req in requests)
	for obj in unit_list("mark_as"):
		if isinstance(obj, str):
			obj = {"args": obj}
		if not isinstance(obj, dict) or not isinstance(obj.get("args"), str):
			diagnostics.append(
				diagnostic_from_error(DeclLoadError("mark_as entry must carry string 'args'", loc=unit_loc))
			)
			continue
		unit.mark_as.append(RawAnnotation(payload=obj["args"], span=_span(obj, file)))
	return unit, diagnostics


def load_unit(
	path: Path,
	*,
	annotation_names: Mapping[AnnotationKind, Iterable[str]] | None = None,
) -> Tuple[DeclUnit, List[Diagnostic]]:
	"""Load a declaration unit file."""
	try:
		data = json.loads(path.read_text(encoding="utf-8"))
	except (OSError, json.JSONDecodeError) as err:
		diag = diagnostic_from_error(
			DeclLoadError(f"cannot load declaration unit: {err}", loc=Span(file=str(path)))
		)
		return DeclUnit(file=str(path)), [diag]
	return load_unit_data(data, file=str(path), annotation_names=annotation_names)


__all__ = [
	"RegistryHints",
	"DeclUnit",
	"load_declaration",
	"load_unit_data",
	"load_unit",
]
