# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Engine entry points.

The host hands over one annotated declaration plus an explicit request
`{kind, payload}`. The payload is parsed, the request is routed to the
generator or the validator, and any failure is translated into exactly one
diagnostic. A failed request never yields partial implementations.

Every call is independent: no state survives between calls and the registry
is only queried.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple

from himark.annotations.parser import AnnotationKind, RawAnnotation, parse, parse_mark_as
from himark.core.diagnostics import Diagnostic
from himark.core.logging import get_logger
from himark.decl.model import Declaration, GenerationRequest
from himark.errors import HimarkError
from himark.report import diagnostic_from_error, diagnostic_from_verdict
from himark.traits.generate import GeneratedImpl, generate, generate_for_type
from himark.traits.registry import TraitRegistry
from himark.traits.validate import Invalid, ValidationVerdict, validate

log = get_logger(__name__)


@dataclass(frozen=True)
class AnnotationRequest:
	kind: AnnotationKind
	payload: RawAnnotation = field(default_factory=RawAnnotation)


@dataclass(frozen=True)
class AnnotatedItem:
	decl: Declaration
	request: AnnotationRequest


@dataclass
class EngineResult:
	impls: List[GeneratedImpl] = field(default_factory=list)
	diagnostics: List[Diagnostic] = field(default_factory=list)
	# Set for validation requests that got past parsing and target checks.
	verdict: Optional[ValidationVerdict] = None

	@property
	def ok(self) -> bool:
		return not any(d.severity == "error" for d in self.diagnostics)


def process(
	decl: Declaration,
	request: AnnotationRequest,
	*,
	registry: Optional[TraitRegistry] = None,
) -> EngineResult:
	"""Run one annotation request against one declaration."""
	try:
		parsed = parse(request.payload, request.kind)
		if request.kind is AnnotationKind.GENERATE:
			assert isinstance(parsed, GenerationRequest)
			impls = generate(decl, parsed, registry=registry)
			return EngineResult(impls=impls)
		verdict = validate(decl, registry=registry)
	except HimarkError as err:
		log.debug("engine.failed", decl=decl.qualified_name, code=err.code, message=err.message)
		return EngineResult(diagnostics=[diagnostic_from_error(err)])
	if isinstance(verdict, Invalid):
		return EngineResult(diagnostics=[diagnostic_from_verdict(decl, verdict)], verdict=verdict)
	return EngineResult(verdict=verdict)


def process_mark_as(
	payload: RawAnnotation | str,
	*,
	registry: Optional[TraitRegistry] = None,
) -> EngineResult:
	"""Run the `Type as A, B` shorthand."""
	try:
		req = parse_mark_as(payload)
		return EngineResult(impls=generate_for_type(req, registry=registry))
	except HimarkError as err:
		log.debug("engine.failed", code=err.code, message=err.message)
		return EngineResult(diagnostics=[diagnostic_from_error(err)])


def process_unit(
	items: Iterable[AnnotatedItem],
	*,
	registry: Optional[TraitRegistry] = None,
) -> List[Tuple[AnnotatedItem, EngineResult]]:
	"""Process each annotated item independently, in the given order."""
	return [(item, process(item.decl, item.request, registry=registry)) for item in items]


__all__ = [
	"AnnotationRequest",
	"AnnotatedItem",
	"EngineResult",
	"process",
	"process_mark_as",
	"process_unit",
]
