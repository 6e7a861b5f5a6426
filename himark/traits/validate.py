# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Marker-trait validator.

A trait qualifies as a marker when its body is empty and every supertrait is
itself marker-qualified: a user marker known to the registry or a
compiler-provided auto trait. The first violation wins: associated items are
checked before supertraits, and within each category the first entry in
declaration order is reported.

Supertrait qualification is a single registry lookup per entry; the validator
never walks the supertrait's own supertraits.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional, Union

from himark.core.logging import get_logger
from himark.core.span import Span
from himark.decl.model import AssocItem, DeclKind, Declaration, TraitClass, TraitReference
from himark.errors import UnresolvedTraitReferenceError, WrongTargetKindError
from himark.traits.registry import TraitRegistry

log = get_logger(__name__)


class ValidationFailure(Enum):
	HAS_ASSOCIATED_ITEMS = auto()
	UNQUALIFIED_SUPERTRAIT = auto()


@dataclass(frozen=True)
class Valid:
	pass


@dataclass(frozen=True)
class Invalid:
	reason: ValidationFailure
	# The offending associated item or supertrait reference.
	location: Union[AssocItem, TraitReference]
	# Declaration-order index of the offender within its category.
	index: int = 0

	@property
	def span(self) -> Span:
		return self.location.span


ValidationVerdict = Union[Valid, Invalid]

VALID = Valid()


def _classify(ref: TraitReference, registry: Optional[TraitRegistry]) -> TraitClass:
	if ref.classification is not None:
		cls = ref.classification
	elif registry is not None:
		cls = registry.classify(ref.path)
	else:
		cls = TraitClass.UNRESOLVED
	if cls is TraitClass.UNRESOLVED:
		raise UnresolvedTraitReferenceError(
			f"cannot find trait '{ref.path}' in this scope",
			loc=ref.span,
			path=str(ref.path),
		)
	return cls


def validate(decl: Declaration, *, registry: Optional[TraitRegistry] = None) -> ValidationVerdict:
	"""
	Decide whether `decl` qualifies as a marker trait.

	Supertraits not pre-classified by the host are looked up in `registry`;
	a name that does not resolve raises UnresolvedTraitReferenceError.
	"""
	if decl.kind is not DeclKind.TRAIT_DEF:
		raise WrongTargetKindError(
			f"`marker` can only be applied to trait definitions; '{decl.name}' is not a trait",
			loc=decl.span,
		)
	if decl.body_items:
		verdict: ValidationVerdict = Invalid(ValidationFailure.HAS_ASSOCIATED_ITEMS, decl.body_items[0], 0)
		log.debug("validate.invalid", trait=decl.qualified_name, reason="assoc_item", item=str(decl.body_items[0]))
		return verdict
	for idx, sup in enumerate(decl.supertraits):
		if not _classify(sup, registry).marker_qualified:
			log.debug("validate.invalid", trait=decl.qualified_name, reason="supertrait", supertrait=str(sup))
			return Invalid(ValidationFailure.UNQUALIFIED_SUPERTRAIT, sup, idx)
	log.debug("validate.valid", trait=decl.qualified_name)
	return VALID


__all__ = [
	"ValidationFailure",
	"Valid",
	"Invalid",
	"ValidationVerdict",
	"VALID",
	"validate",
]
