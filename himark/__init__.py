# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
himark: marker-trait declaration processor.

Generates empty marker implementations for annotated types and certifies that
trait definitions qualify as marker traits.
"""

__version__ = "0.3.0"
