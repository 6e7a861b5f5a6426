# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from .registry import (
	DEFAULT_AUTO_TRAITS,
	TraitRegistry,
	StaticTraitRegistry,
	trait_path_key,
)
from .generate import (
	GeneratedImpl,
	generate,
	generate_for_type,
	render_impl,
	render_impls,
)
from .validate import (
	ValidationFailure,
	Valid,
	Invalid,
	ValidationVerdict,
	VALID,
	validate,
)

__all__ = [
	"DEFAULT_AUTO_TRAITS",
	"TraitRegistry",
	"StaticTraitRegistry",
	"trait_path_key",
	"GeneratedImpl",
	"generate",
	"generate_for_type",
	"render_impl",
	"render_impls",
	"ValidationFailure",
	"Valid",
	"Invalid",
	"ValidationVerdict",
	"VALID",
	"validate",
]
