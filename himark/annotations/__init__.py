# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from .parser import (
	AnnotationKind,
	RawAnnotation,
	DEFAULT_ANNOTATION_NAMES,
	classify_annotation,
	parse,
	parse_trait_list,
	parse_marker_args,
	parse_mark_as,
)

__all__ = [
	"AnnotationKind",
	"RawAnnotation",
	"DEFAULT_ANNOTATION_NAMES",
	"classify_annotation",
	"parse",
	"parse_trait_list",
	"parse_marker_args",
	"parse_mark_as",
]
