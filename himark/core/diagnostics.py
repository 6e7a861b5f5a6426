# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Common diagnostic structure handed back to the host compiler.

A message plus a stable code, a span and optional notes. The host decides how
to surface it; the engine only reports.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict

from .span import Span


@dataclass
class Diagnostic:
	"""Represents a compile-time diagnostic (error/warning/etc.)."""

	message: str
	code: str | None = None
	# Which engine pass produced the diagnostic ("annotation", "generate",
	# "validate", "load").
	phase: str | None = None
	severity: str = "error"
	span: Span = field(default_factory=Span)  # Source location (Span() denotes unknown).
	notes: list[str] = field(default_factory=list)

	def __post_init__(self) -> None:
		if self.span is None:  # type: ignore[unreachable]
			self.span = Span()

	def to_json(self, *, default_file: str | None = None) -> Dict[str, Any]:
		"""Render to a structured JSON-friendly dict."""
		return {
			"phase": self.phase,
			"code": self.code,
			"message": self.message,
			"severity": self.severity,
			"file": self.span.file or default_file,
			"line": self.span.line,
			"column": self.span.column,
			"notes": list(self.notes),
		}

	def format_human(self, *, default_file: str | None = None) -> str:
		code = f" [{self.code}]" if self.code else ""
		out = f"{self.severity}{code}: {self.message}"
		# No location prefix when nothing is known about the source.
		if not (self.span.is_unknown() and default_file is None):
			file = self.span.file or default_file or "<unknown>"
			line = self.span.line if self.span.line is not None else "?"
			col = self.span.column if self.span.column is not None else "?"
			out = f"{file}:{line}:{col}: {out}"
		for note in self.notes:
			out += f"\n  note: {note}"
		return out


__all__ = ["Diagnostic"]
