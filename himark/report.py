# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Diagnostic reporter: converts engine failures into host diagnostics.

Each failure maps to exactly one diagnostic pinned at the offending trait
name, associated item or supertrait.
"""

from __future__ import annotations

from himark.core.diagnostics import Diagnostic
from himark.decl.model import Declaration
from himark.errors import HimarkError
from himark.traits.validate import Invalid, ValidationFailure

MARKER_ASSOC_ITEM = "E-MARKER-ASSOC-ITEM"
MARKER_SUPERTRAIT = "E-MARKER-SUPERTRAIT"


def diagnostic_from_error(err: HimarkError) -> Diagnostic:
	return Diagnostic(
		message=err.message,
		code=err.code,
		phase=err.phase,
		severity="error",
		span=err.loc,
	)


def diagnostic_from_verdict(decl: Declaration, verdict: Invalid) -> Diagnostic:
	if verdict.reason is ValidationFailure.HAS_ASSOCIATED_ITEMS:
		return Diagnostic(
			message=f"marker trait '{decl.name}' cannot have associated items; found `{verdict.location}`",
			code=MARKER_ASSOC_ITEM,
			phase="validate",
			span=verdict.span,
			notes=["marker traits carry no methods, constants or associated types"],
		)
	return Diagnostic(
		message=f"supertrait '{verdict.location}' of marker trait '{decl.name}' is not a marker trait",
		code=MARKER_SUPERTRAIT,
		phase="validate",
		span=verdict.span,
		notes=["every supertrait of a marker trait must be a marker trait or an auto trait"],
	)


__all__ = ["MARKER_ASSOC_ITEM", "MARKER_SUPERTRAIT", "diagnostic_from_error", "diagnostic_from_verdict"]
