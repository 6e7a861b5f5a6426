# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
User-facing errors raised by the annotation parser, the generator and the
front-end loaders.

Every error carries a stable `code` and a `loc` (Span) so the reporter can
convert it 1:1 into a pinned diagnostic instead of crashing with a raw Python
exception. Marker validation failures are not exceptions: the validator
returns a `ValidationVerdict`.
"""

from __future__ import annotations

from typing import Optional

from himark.core.span import Span


class HimarkError(ValueError):
	"""Base class; terminal for the one declaration being processed."""

	code = "E-HIMARK"
	phase = "engine"

	def __init__(self, message: str, *, loc: Optional[Span] = None) -> None:
		super().__init__(message)
		self.message = message
		self.loc = Span.from_loc(loc)


class ParseError(HimarkError):
	phase = "annotation"


class EmptyTraitListError(ParseError):
	"""Generation annotation given with no trait names."""

	code = "E-EMPTY-TRAIT-LIST"


class MalformedTraitNameError(ParseError):
	"""A token in the trait list is not a valid path."""

	code = "E-MALFORMED-TRAIT-NAME"

	def __init__(self, message: str, *, loc: Optional[Span] = None, token: str | None = None) -> None:
		super().__init__(message, loc=loc)
		self.token = token


class UnexpectedArgumentsError(ParseError):
	"""Validation annotation given arguments."""

	code = "E-UNEXPECTED-ARGS"


class GenError(HimarkError):
	phase = "generate"


class WrongTargetKindError(GenError):
	"""Annotation applied to a declaration kind it does not support."""

	code = "E-WRONG-TARGET"


class UnresolvedTraitReferenceError(GenError):
	"""A named trait cannot be found by the registry."""

	code = "E-UNRESOLVED-TRAIT"

	def __init__(self, message: str, *, loc: Optional[Span] = None, path: str | None = None) -> None:
		super().__init__(message, loc=loc)
		self.path = path


class DeclLoadError(HimarkError):
	"""The serialized declaration unit handed over by the host is malformed."""

	code = "E-DECL-LOAD"
	phase = "load"


class ConfigError(HimarkError):
	code = "E-CONFIG"
	phase = "config"


__all__ = [
	"HimarkError",
	"ParseError",
	"EmptyTraitListError",
	"MalformedTraitNameError",
	"UnexpectedArgumentsError",
	"GenError",
	"WrongTargetKindError",
	"UnresolvedTraitReferenceError",
	"DeclLoadError",
	"ConfigError",
]
