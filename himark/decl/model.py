# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Declaration model consumed by the engine.

The host front-end hands over an already-parsed item: a struct-like type
(struct, enum or union, all treated alike) or a trait definition. Generic
parameters, bounds and where-predicates are kept as ordered, opaque tokens:
the generator echoes them verbatim and never re-analyzes them.

All values are frozen; transformations build new values.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Optional, Tuple, Union

from himark.core.span import Span


class DeclKind(Enum):
	STRUCT_LIKE = auto()
	TRAIT_DEF = auto()


class GenericParamKind(Enum):
	TYPE = auto()
	CONST = auto()
	LIFETIME = auto()


class TraitClass(Enum):
	"""Classification answered by the host trait registry."""

	USER_MARKER = auto()
	COMPILER_AUTO = auto()
	ORDINARY = auto()
	UNRESOLVED = auto()

	@property
	def marker_qualified(self) -> bool:
		return self in (TraitClass.USER_MARKER, TraitClass.COMPILER_AUTO)


GenericArg = Union["TypePath", str]


@dataclass(frozen=True)
class TypePath:
	"""
	A path expression such as `Send`, `std::marker::Send` or `Foo<T, 'a, 4>`.

	Generic arguments attach to the last segment. Lifetime and literal
	arguments are kept as their source text.
	"""

	segments: Tuple[str, ...]
	args: Tuple[GenericArg, ...] = ()
	leading_colons: bool = False

	def __post_init__(self) -> None:
		if not self.segments:
			raise ValueError("TypePath requires at least one segment")

	@classmethod
	def simple(cls, text: str) -> "TypePath":
		"""Build a path from `a::b::C` text (no generic arguments)."""
		leading = text.startswith("::")
		body = text[2:] if leading else text
		return cls(segments=tuple(body.split("::")), leading_colons=leading)

	def __str__(self) -> str:
		base = ("::" if self.leading_colons else "") + "::".join(self.segments)
		if not self.args:
			return base
		return f"{base}<{', '.join(str(a) for a in self.args)}>"


@dataclass(frozen=True)
class GenericParam:
	name: str
	kind: GenericParamKind = GenericParamKind.TYPE
	bounds: Tuple[str, ...] = ()
	# Value type for const parameters (`const N: usize`).
	const_type: Optional[str] = None
	span: Span = field(default_factory=Span, compare=False)

	def __post_init__(self) -> None:
		if self.kind is GenericParamKind.CONST:
			if self.const_type is None:
				raise ValueError(f"const generic parameter '{self.name}' requires a type")
			if self.bounds:
				raise ValueError(f"const generic parameter '{self.name}' cannot have bounds")
		if self.kind is GenericParamKind.LIFETIME and not self.name.startswith("'"):
			raise ValueError(f"lifetime parameter '{self.name}' must start with an apostrophe")

	def declaration_text(self) -> str:
		"""Text of the parameter as written in a generic parameter list."""
		if self.kind is GenericParamKind.CONST:
			return f"const {self.name}: {self.const_type}"
		if self.bounds:
			return f"{self.name}: {' + '.join(self.bounds)}"
		return self.name


@dataclass(frozen=True)
class WherePredicate:
	subject: str
	bounds: Tuple[str, ...]
	span: Span = field(default_factory=Span, compare=False)

	def __str__(self) -> str:
		return f"{self.subject}: {' + '.join(self.bounds)}"


@dataclass(frozen=True)
class TraitReference:
	"""
	A named trait plus the registry's classification of it.

	`classification` is None when the host did not pre-classify the
	reference; the validator then asks the registry.
	"""

	path: TypePath
	classification: Optional[TraitClass] = None
	span: Span = field(default_factory=Span, compare=False)

	def __str__(self) -> str:
		return str(self.path)


@dataclass(frozen=True)
class AssocItem:
	"""An associated item of a trait body: `fn`, `const` or `type`."""

	kind: str
	name: str
	span: Span = field(default_factory=Span, compare=False)

	def __str__(self) -> str:
		return f"{self.kind} {self.name}"


@dataclass(frozen=True)
class Declaration:
	kind: DeclKind
	name: str
	generics: Tuple[GenericParam, ...] = ()
	where: Tuple[WherePredicate, ...] = ()
	# Only populated for trait definitions.
	body_items: Tuple[AssocItem, ...] = ()
	supertraits: Tuple[TraitReference, ...] = ()
	span: Span = field(default_factory=Span, compare=False)
	module: Optional[str] = None

	def __post_init__(self) -> None:
		if self.kind is DeclKind.STRUCT_LIKE and (self.body_items or self.supertraits):
			raise ValueError(f"struct-like declaration '{self.name}' cannot carry trait body items or supertraits")
		seen: set[str] = set()
		for gp in self.generics:
			if gp.name in seen:
				raise ValueError(f"duplicate generic parameter '{gp.name}' on '{self.name}'")
			seen.add(gp.name)

	@property
	def qualified_name(self) -> str:
		return f"{self.module}::{self.name}" if self.module else self.name

	def instantiation_args(self) -> Tuple[str, ...]:
		"""Parameter names used to instantiate the type in an impl header."""
		return tuple(gp.name for gp in self.generics)


@dataclass(frozen=True)
class GenerationRequest:
	"""Parsed `mark(...)` payload: an ordered, non-empty trait list."""

	traits: Tuple[TraitReference, ...]
	span: Span = field(default_factory=Span, compare=False)

	def __post_init__(self) -> None:
		if not self.traits:
			raise ValueError("GenerationRequest requires at least one trait")


@dataclass(frozen=True)
class MarkAsRequest:
	"""Parsed `Type as A, B` shorthand: mark an explicit type expression."""

	target: TypePath
	traits: Tuple[TraitReference, ...]
	span: Span = field(default_factory=Span, compare=False)


__all__ = [
	"DeclKind",
	"GenericParamKind",
	"TraitClass",
	"GenericArg",
	"TypePath",
	"GenericParam",
	"WherePredicate",
	"TraitReference",
	"AssocItem",
	"Declaration",
	"GenerationRequest",
	"MarkAsRequest",
]
