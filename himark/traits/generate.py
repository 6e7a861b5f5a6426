# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Implementation generator.

Turns a generating annotation on a struct-like type into one empty
implementation per requested trait. Each implementation re-declares the
type's generic parameter list and where clause verbatim and instantiates the
target with exactly those parameter names, so the stub holds for every
instantiation of a generic type.

No deduplication: a trait named twice yields two (conflicting) stubs, and the
host compiler reports the conflict. Output order follows request order.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from himark.core.logging import get_logger
from himark.core.span import Span
from himark.decl.model import (
	DeclKind,
	Declaration,
	GenerationRequest,
	GenericParam,
	MarkAsRequest,
	TraitClass,
	TraitReference,
	TypePath,
	WherePredicate,
)
from himark.errors import EmptyTraitListError, UnresolvedTraitReferenceError, WrongTargetKindError
from himark.traits.registry import TraitRegistry

log = get_logger(__name__)


@dataclass(frozen=True)
class GeneratedImpl:
	"""An implementation stub: `impl<generics> Trait for Target<args> where ... {}`."""

	trait_ref: TraitReference
	target_name: str
	generics: Tuple[GenericParam, ...] = ()
	where: Tuple[WherePredicate, ...] = ()
	# Arguments instantiating the target in the header; for declarations these
	# are the generic parameter names.
	target_args: Tuple[str, ...] = ()
	# Always empty; kept so the shape of a full implementation is explicit.
	body: Tuple[object, ...] = ()
	span: Span = field(default_factory=Span, compare=False)

	@property
	def target(self) -> str:
		if not self.target_args:
			return self.target_name
		return f"{self.target_name}<{', '.join(self.target_args)}>"


def _resolve_all(traits: Tuple[TraitReference, ...], registry: Optional[TraitRegistry]) -> None:
	if registry is None:
		return
	for ref in traits:
		if registry.classify(ref.path) is TraitClass.UNRESOLVED:
			raise UnresolvedTraitReferenceError(
				f"cannot find trait '{ref.path}' in this scope",
				loc=ref.span,
				path=str(ref.path),
			)


def generate(
	decl: Declaration,
	req: GenerationRequest,
	*,
	registry: Optional[TraitRegistry] = None,
) -> List[GeneratedImpl]:
	"""
	Produce one empty implementation per trait in `req`, in request order.

	Raises WrongTargetKindError for trait definitions and, when a registry is
	given, UnresolvedTraitReferenceError for names the registry cannot find.
	Nothing is produced unless every trait resolves.
	"""
	if decl.kind is not DeclKind.STRUCT_LIKE:
		raise WrongTargetKindError(
			f"`mark` can only be applied to structs, enums and unions; '{decl.name}' is a trait",
			loc=decl.span,
		)
	_resolve_all(req.traits, registry)
	args = decl.instantiation_args()
	impls = [
		GeneratedImpl(
			trait_ref=ref,
			target_name=decl.name,
			generics=decl.generics,
			where=decl.where,
			target_args=args,
			span=ref.span,
		)
		for ref in req.traits
	]
	log.debug("generate.done", target=decl.qualified_name, traits=[str(r) for r in req.traits])
	return impls


def generate_for_type(
	req: MarkAsRequest,
	*,
	registry: Optional[TraitRegistry] = None,
) -> List[GeneratedImpl]:
	"""Produce empty implementations for an explicit, concrete type expression."""
	if not req.traits:
		raise EmptyTraitListError("annotation requires at least one trait name", loc=req.span)
	_resolve_all(req.traits, registry)
	target = req.target
	base = TypePath(segments=target.segments, leading_colons=target.leading_colons)
	impls = [
		GeneratedImpl(
			trait_ref=ref,
			target_name=str(base),
			target_args=tuple(str(a) for a in target.args),
			span=ref.span,
		)
		for ref in req.traits
	]
	log.debug("generate.done", target=str(target), traits=[str(r) for r in req.traits])
	return impls


def render_impl(impl: GeneratedImpl) -> str:
	"""Render a stub in source form."""
	head = "impl"
	if impl.generics:
		head += "<" + ", ".join(gp.declaration_text() for gp in impl.generics) + ">"
	out = f"{head} {impl.trait_ref.path} for {impl.target}"
	if impl.where:
		out += " where " + ", ".join(str(p) for p in impl.where)
	return out + " {}"


def render_impls(impls: List[GeneratedImpl]) -> str:
	return "".join(render_impl(i) + "\n" for i in impls)


__all__ = [
	"GeneratedImpl",
	"generate",
	"generate_for_type",
	"render_impl",
	"render_impls",
]
