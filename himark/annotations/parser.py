# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Annotation payload parser.

Two annotation forms reach the engine:

- the generating annotation (`mark(A, B)`): a non-empty, comma-separated list
  of trait paths, parsed into a `GenerationRequest`;
- the validating annotation (`marker`): takes no arguments.

The payload is the raw token text following the annotation name. A single
enclosing delimiter pair (`(...)`, `[...]`, `{...}`) is tolerated so hosts may
pass the delimited group as-is. Parsing is pure and fails as a whole: a
malformed name is never skipped while keeping the rest of the list.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum, auto
from pathlib import Path
from typing import Iterable, List, Mapping, Optional, Tuple

from lark import Lark, Token, Tree
from lark.exceptions import UnexpectedCharacters, UnexpectedEOF, UnexpectedInput, UnexpectedToken

from himark.core.logging import get_logger
from himark.core.span import Span
from himark.decl.model import GenerationRequest, MarkAsRequest, TraitReference, TypePath
from himark.errors import EmptyTraitListError, MalformedTraitNameError, UnexpectedArgumentsError

log = get_logger(__name__)

_GRAMMAR_PATH = Path(__file__).with_name("grammar.lark")
_GRAMMAR_SRC = _GRAMMAR_PATH.read_text()

_PARSER = Lark(
	_GRAMMAR_SRC,
	parser="lalr",
	lexer="basic",
	start=["trait_list", "mark_as"],
	propagate_positions=True,
	maybe_placeholders=False,
)

_DELIMS = {"(": ")", "[": "]", "{": "}"}
_DANGLING_AS = re.compile(r"\s*(?=\S)(?:(?!\bas\b).)+?\s+as\s*", re.DOTALL)


class AnnotationKind(Enum):
	GENERATE = auto()
	VALIDATE = auto()


# Annotation names recognized by the front-end adapter, matched on the final
# path segment (`mark`, `hi::mark`, `himark::mark`).
DEFAULT_ANNOTATION_NAMES: Mapping[AnnotationKind, Tuple[str, ...]] = {
	AnnotationKind.GENERATE: ("mark",),
	AnnotationKind.VALIDATE: ("marker",),
}


@dataclass(frozen=True)
class RawAnnotation:
	"""Unparsed payload plus the location where it starts in the source."""

	payload: str = ""
	span: Span = field(default_factory=Span)


def classify_annotation(
	name: str,
	*,
	names: Mapping[AnnotationKind, Iterable[str]] | None = None,
) -> Optional[AnnotationKind]:
	"""Map an annotation name to the request kind; None for unrelated annotations."""
	table = names if names is not None else DEFAULT_ANNOTATION_NAMES
	last = name.strip().split("::")[-1]
	for kind, candidates in table.items():
		if last in candidates:
			return kind
	return None


def _as_raw(payload: RawAnnotation | str) -> RawAnnotation:
	if isinstance(payload, RawAnnotation):
		return payload
	return RawAnnotation(payload=payload)


def _blank_delimiters(text: str) -> str:
	"""
	Replace one enclosing delimiter pair with spaces.

	Positions are preserved so error columns still point into the original
	payload.
	"""
	stripped = text.strip()
	if len(stripped) < 2 or stripped[0] not in _DELIMS or stripped[-1] != _DELIMS[stripped[0]]:
		return text
	start = text.index(stripped[0])
	end = text.rindex(stripped[-1])
	return text[:start] + " " + text[start + 1:end] + " " + text[end + 1:]


def _meta_span(raw: RawAnnotation, node: Tree) -> Span:
	meta = node.meta
	if getattr(meta, "empty", True):
		return raw.span
	width = None
	if meta.end_line == meta.line:
		width = meta.end_column - meta.column
	return raw.span.offset(meta.line, meta.column, width=width)


def _build_path(node: Tree) -> TypePath:
	leading = False
	segments: List[str] = []
	args: Tuple[object, ...] = ()
	for idx, child in enumerate(node.children):
		if isinstance(child, Token):
			if child.type == "PATH_SEP" and idx == 0:
				leading = True
			continue
		# segment: NAME generic_args?
		name_tok = child.children[0]
		segments.append(str(name_tok))
		args = ()
		if len(child.children) > 1:
			args = tuple(_build_generic_arg(a) for a in child.children[1].children)
	return TypePath(segments=tuple(segments), args=args, leading_colons=leading)  # type: ignore[arg-type]


def _build_generic_arg(node: object) -> object:
	if isinstance(node, Token):
		return str(node)
	if isinstance(node, Tree) and node.data == "path":
		return _build_path(node)
	raise TypeError(f"unexpected generic argument node {node!r}")


def _build_trait_list(raw: RawAnnotation, tree: Tree) -> Tuple[TraitReference, ...]:
	return tuple(
		TraitReference(path=_build_path(child), span=_meta_span(raw, child))
		for child in tree.children
		if isinstance(child, Tree) and child.data == "path"
	)


def _malformed(raw: RawAnnotation, text: str, err: UnexpectedInput) -> MalformedTraitNameError:
	line = getattr(err, "line", None)
	column = getattr(err, "column", None)
	token: str | None = None
	if isinstance(err, UnexpectedToken):
		token = None if err.token.type == "$END" else str(err.token)
	elif isinstance(err, UnexpectedCharacters):
		token = text[err.pos_in_stream]
	if token is None or isinstance(err, UnexpectedEOF):
		# Report at the end of the (right-trimmed) payload.
		lines = text.rstrip().split("\n")
		line, column = len(lines), len(lines[-1]) + 1
	if token is None:
		message = "malformed trait name: unexpected end of annotation arguments"
	else:
		message = f"malformed trait name: unexpected '{token}' in annotation arguments"
	loc = raw.span.offset(line or 1, column or 1, width=len(token) if token else None)
	return MalformedTraitNameError(message, loc=loc, token=token)


def parse_trait_list(payload: RawAnnotation | str) -> GenerationRequest:
	"""Parse the generating annotation's payload into a `GenerationRequest`."""
	raw = _as_raw(payload)
	text = _blank_delimiters(raw.payload)
	if not text.strip():
		raise EmptyTraitListError("annotation requires at least one trait name", loc=raw.span)
	try:
		tree = _PARSER.parse(text, start="trait_list")
	except UnexpectedInput as err:
		raise _malformed(raw, text, err) from err
	traits = _build_trait_list(raw, tree)
	log.debug("annotation.parsed", kind="generate", traits=[str(t) for t in traits])
	return GenerationRequest(traits=traits, span=raw.span)


def parse_marker_args(payload: RawAnnotation | str) -> None:
	"""The validating annotation takes no arguments."""
	raw = _as_raw(payload)
	text = _blank_delimiters(raw.payload)
	if text.strip():
		first = len(text) - len(text.lstrip())
		prefix = text[:first]
		line = prefix.count("\n") + 1
		column = first - (prefix.rfind("\n") + 1) + 1
		raise UnexpectedArgumentsError(
			"marker annotation does not take arguments",
			loc=raw.span.offset(line, column),
		)
	return None


def parse_mark_as(payload: RawAnnotation | str) -> MarkAsRequest:
	"""Parse the typed shorthand `Type as A, B`."""
	raw = _as_raw(payload)
	text = _blank_delimiters(raw.payload)
	if not text.strip():
		raise MalformedTraitNameError("expected `Type as Trait, ...`", loc=raw.span)
	# `Type as` with nothing after it is an empty trait list, not a syntax error.
	if _DANGLING_AS.fullmatch(text):
		raise EmptyTraitListError("annotation requires at least one trait name", loc=raw.span)
	try:
		tree = _PARSER.parse(text, start="mark_as")
	except UnexpectedInput as err:
		raise _malformed(raw, text, err) from err
	target_node = tree.children[0]
	list_node = next(c for c in tree.children if isinstance(c, Tree) and c.data == "trait_list")
	traits = _build_trait_list(raw, list_node)
	target = _build_path(target_node)
	log.debug("annotation.parsed", kind="mark_as", target=str(target), traits=[str(t) for t in traits])
	return MarkAsRequest(target=target, traits=traits, span=raw.span)


def parse(payload: RawAnnotation | str, mode: AnnotationKind) -> GenerationRequest | None:
	"""Classify-and-parse entry point used by the engine."""
	if mode is AnnotationKind.GENERATE:
		return parse_trait_list(payload)
	if mode is AnnotationKind.VALIDATE:
		return parse_marker_args(payload)
	raise TypeError(f"unsupported annotation kind {mode!r}")


__all__ = [
	"AnnotationKind",
	"RawAnnotation",
	"DEFAULT_ANNOTATION_NAMES",
	"classify_annotation",
	"parse",
	"parse_trait_list",
	"parse_marker_args",
	"parse_mark_as",
]
