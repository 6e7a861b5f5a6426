# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
himarkc: command-line host for the marker engine.

Plays the host-compiler role around the engine: loads a declaration unit,
owns the trait registry, runs every annotated declaration through the engine
and surfaces the generated stubs and diagnostics.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import List, Set, Tuple

from himark import __version__
from himark.annotations.parser import AnnotationKind
from himark.config import HimarkConfig, resolve_config
from himark.core.diagnostics import Diagnostic
from himark.core.logging import configure_logging, get_logger
from himark.decl.loader import DeclUnit, load_unit
from himark.decl.model import DeclKind
from himark.engine import process, process_mark_as, process_unit
from himark.errors import ConfigError
from himark.report import diagnostic_from_error
from himark.traits.generate import GeneratedImpl, render_impl, render_impls
from himark.traits.registry import StaticTraitRegistry

log = get_logger(__name__)


def _with_unit_traits(unit: DeclUnit, registry: StaticTraitRegistry, markers: Set[str]) -> StaticTraitRegistry:
	marker_names: List[str] = []
	ordinary: List[str] = []
	for decl in unit.traits:
		names = [decl.name, decl.qualified_name]
		if decl.qualified_name in markers:
			marker_names.extend(names)
		else:
			ordinary.extend(names)
	return registry.with_ordinary(ordinary).with_markers(marker_names)


def unit_registry(unit: DeclUnit, base: StaticTraitRegistry) -> StaticTraitRegistry:
	"""
	Registry as the host sees it for this unit.

	A trait carrying the validating annotation counts as a marker only if it
	validates. Candidates are checked against a registry that treats every
	remaining candidate as a marker; failures drop out and the rest are
	re-checked until the set is stable, so a failed marker never qualifies
	another trait and declaration order does not matter. Other traits defined
	in the unit are ordinary. Both are registered under their plain and
	module-qualified names.
	"""
	registry = base.with_markers(unit.registry.markers).with_ordinary(unit.registry.ordinary)
	if unit.registry.auto_traits is not None:
		registry = StaticTraitRegistry.build(
			auto_traits=unit.registry.auto_traits,
			markers=registry.markers,
			ordinary=registry.ordinary,
			open_world=registry.open_world,
		)
	checks = [
		item
		for item in unit.items
		if item.decl.kind is DeclKind.TRAIT_DEF and item.request.kind is AnnotationKind.VALIDATE
	]
	candidates = {item.decl.qualified_name for item in checks}
	while True:
		settled = _with_unit_traits(unit, registry, candidates)
		rejected = {
			item.decl.qualified_name
			for item in checks
			if item.decl.qualified_name in candidates and not process(item.decl, item.request, registry=settled).ok
		}
		if not rejected:
			return settled
		log.debug("unit.markers_rejected", traits=sorted(rejected))
		candidates -= rejected


def run_unit(unit: DeclUnit, registry: StaticTraitRegistry) -> Tuple[List[GeneratedImpl], List[Diagnostic]]:
	impls: List[GeneratedImpl] = []
	diagnostics: List[Diagnostic] = []
	registry = unit_registry(unit, registry)
	for item, result in process_unit(unit.items, registry=registry):
		impls.extend(result.impls)
		diagnostics.extend(result.diagnostics)
		log.debug(
			"unit.item",
			decl=item.decl.qualified_name,
			kind=item.request.kind.name.lower(),
			impls=len(result.impls),
			ok=result.ok,
		)
	for raw in unit.mark_as:
		result = process_mark_as(raw, registry=registry)
		impls.extend(result.impls)
		diagnostics.extend(result.diagnostics)
	return impls, diagnostics


def _emit_json(exit_code: int, impls: List[GeneratedImpl], diagnostics: List[Diagnostic], source: Path) -> None:
	payload = {
		"exit_code": exit_code,
		"impls": [render_impl(i) for i in impls],
		"diagnostics": [d.to_json(default_file=str(source)) for d in diagnostics],
	}
	print(json.dumps(payload))


def main(argv: list[str] | None = None) -> int:
	"""
	Load a declaration unit, run the engine, print stubs and diagnostics.

	With --json, prints {"exit_code", "impls", "diagnostics"}; otherwise stubs
	go to stdout (or --emit) and diagnostics to stderr as file:line:col lines.
	"""
	parser = argparse.ArgumentParser(prog="himarkc", description="marker-trait declaration processor")
	parser.add_argument("unit", type=Path, help="Path to a JSON declaration unit")
	parser.add_argument("--config", type=Path, help="Path to config JSON (default: ./himark.json when present)")
	parser.add_argument(
		"--auto-trait",
		dest="auto_traits",
		action="append",
		default=None,
		help="Treat this trait as a compiler auto trait (repeatable; replaces the configured list)",
	)
	parser.add_argument(
		"--marker",
		dest="markers",
		action="append",
		default=[],
		help="Register an externally declared marker trait (repeatable)",
	)
	parser.add_argument("--emit", type=Path, help="Write generated stubs to this path instead of stdout")
	parser.add_argument(
		"--json",
		action="store_true",
		help="Emit impls and diagnostics as JSON (phase/code/message/severity/file/line/column)",
	)
	parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging on stderr")
	parser.add_argument("--log-json", action="store_true", help="Render logs as JSON lines")
	parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
	args = parser.parse_args(argv)

	configure_logging(verbose=args.verbose, log_json=args.log_json)

	try:
		config = resolve_config(args.config)
	except ConfigError as err:
		diag = diagnostic_from_error(err)
		if args.json:
			_emit_json(1, [], [diag], args.unit)
		else:
			print(diag.format_human(), file=sys.stderr)
		return 1
	if args.auto_traits is not None:
		config = HimarkConfig(
			auto_traits=tuple(args.auto_traits),
			markers=config.markers,
			ordinary_traits=config.ordinary_traits,
			open_world=config.open_world,
			annotation_names=config.annotation_names,
		)
	registry = config.registry().with_markers(args.markers)

	unit, diagnostics = load_unit(args.unit, annotation_names=config.annotation_names)
	impls, engine_diags = run_unit(unit, registry)
	diagnostics.extend(engine_diags)
	exit_code = 1 if any(d.severity == "error" for d in diagnostics) else 0
	log.debug("himarkc.done", unit=str(args.unit), impls=len(impls), diagnostics=len(diagnostics))

	if args.json:
		_emit_json(exit_code, impls, diagnostics, args.unit)
		return exit_code

	text = render_impls(impls)
	if args.emit is not None:
		args.emit.parent.mkdir(parents=True, exist_ok=True)
		args.emit.write_text(text, encoding="utf-8")
	elif text:
		sys.stdout.write(text)
	for diag in diagnostics:
		print(diag.format_human(default_file=str(args.unit)), file=sys.stderr)
	return exit_code


__all__ = ["main", "run_unit", "unit_registry"]
