# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Lightweight source span representation used by diagnostics.

A Span can wrap whatever location object the host front-end provides via the
`raw` field while also carrying optional file/line/column info when available.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class Span:
	"""Represents a source span (best-effort file/line/column plus raw host loc)."""

	file: Optional[str] = None
	line: Optional[int] = None
	column: Optional[int] = None
	end_line: Optional[int] = None
	end_column: Optional[int] = None
	raw: Any = None

	@classmethod
	def from_loc(cls, loc: Any) -> "Span":
		"""
		Construct a Span from an existing host/parser location object.

		If `loc` is already a Span, it is returned unchanged; otherwise the
		host-specific object is stored in `raw`.
		"""
		if loc is None:
			return cls()
		if isinstance(loc, cls):
			return loc
		return cls(
			file=getattr(loc, "file", None) or getattr(loc, "filename", None) or None,
			line=getattr(loc, "line", None),
			column=getattr(loc, "column", None),
			end_line=getattr(loc, "end_line", None),
			end_column=getattr(loc, "end_column", None),
			raw=loc,
		)

	def is_unknown(self) -> bool:
		return self.line is None and self.file is None

	def offset(self, line: int, column: int, *, width: int | None = None) -> "Span":
		"""
		Return a span for a position relative to this one.

		`line`/`column` are 1-based positions inside a fragment that starts at
		this span (e.g. an annotation payload). Columns only shift on the first
		line of the fragment.
		"""
		if self.line is None:
			abs_line, abs_col = line, column
		elif line == 1:
			abs_line, abs_col = self.line, (self.column or 1) + column - 1
		else:
			abs_line, abs_col = self.line + line - 1, column
		end_col = abs_col + width if width is not None else None
		return Span(
			file=self.file,
			line=abs_line,
			column=abs_col,
			end_line=abs_line if width is not None else None,
			end_column=end_col,
		)


__all__ = ["Span"]
