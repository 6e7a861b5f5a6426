# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from .model import (
	DeclKind,
	GenericParamKind,
	TraitClass,
	TypePath,
	GenericParam,
	WherePredicate,
	TraitReference,
	AssocItem,
	Declaration,
	GenerationRequest,
	MarkAsRequest,
)

__all__ = [
	"DeclKind",
	"GenericParamKind",
	"TraitClass",
	"TypePath",
	"GenericParam",
	"WherePredicate",
	"TraitReference",
	"AssocItem",
	"Declaration",
	"GenerationRequest",
	"MarkAsRequest",
]
