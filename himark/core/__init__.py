# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from .span import Span
from .diagnostics import Diagnostic

__all__ = ["Span", "Diagnostic"]
