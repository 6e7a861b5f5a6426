# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Driver configuration.

Format (JSON, all keys optional):
{
  "format": "himark-config",
  "version": 0,
  "auto_traits": ["Send", "Sync", ...],
  "markers": ["crate::tags::Array", ...],
  "ordinary_traits": ["Clone", "Debug", ...],
  "open_world": false,
  "annotation_names": {"generate": ["mark"], "validate": ["marker"]}
}

The default location is `./himark.json`; an explicit `--config` path must
exist.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from himark.annotations.parser import DEFAULT_ANNOTATION_NAMES, AnnotationKind
from himark.core.span import Span
from himark.errors import ConfigError
from himark.traits.registry import DEFAULT_AUTO_TRAITS, StaticTraitRegistry

DEFAULT_CONFIG_NAME = "himark.json"

_ANNOTATION_KEYS: Dict[str, AnnotationKind] = {
	"generate": AnnotationKind.GENERATE,
	"validate": AnnotationKind.VALIDATE,
}


@dataclass(frozen=True)
class HimarkConfig:
	auto_traits: Tuple[str, ...] = tuple(sorted(DEFAULT_AUTO_TRAITS))
	markers: Tuple[str, ...] = ()
	ordinary_traits: Tuple[str, ...] = ()
	open_world: bool = False
	annotation_names: Dict[AnnotationKind, Tuple[str, ...]] = field(
		default_factory=lambda: dict(DEFAULT_ANNOTATION_NAMES)
	)

	def registry(self) -> StaticTraitRegistry:
		return StaticTraitRegistry.build(
			auto_traits=self.auto_traits,
			markers=self.markers,
			ordinary=self.ordinary_traits,
			open_world=self.open_world,
		)


def _names(obj: Dict[str, Any], key: str, path: Path) -> Optional[Tuple[str, ...]]:
	if key not in obj:
		return None
	val = obj[key]
	if not isinstance(val, list) or not all(isinstance(x, str) and x for x in val):
		raise ConfigError(f"config '{key}' must be a list of non-empty strings", loc=Span(file=str(path)))
	return tuple(val)


def load_config_json(path: Path) -> HimarkConfig:
	"""Load a config file; raises ConfigError on malformed content."""
	loc = Span(file=str(path))
	try:
		obj = json.loads(path.read_text(encoding="utf-8"))
	except (OSError, json.JSONDecodeError) as err:
		raise ConfigError(f"cannot read config: {err}", loc=loc) from err
	if not isinstance(obj, dict):
		raise ConfigError("config must be a JSON object", loc=loc)
	if obj.get("format", "himark-config") != "himark-config" or obj.get("version", 0) != 0:
		raise ConfigError("unsupported config format/version", loc=loc)

	cfg = HimarkConfig()
	auto = _names(obj, "auto_traits", path)
	markers = _names(obj, "markers", path) or ()
	ordinary = _names(obj, "ordinary_traits", path) or ()
	open_world = obj.get("open_world", False)
	if not isinstance(open_world, bool):
		raise ConfigError("config 'open_world' must be a boolean", loc=loc)

	ann_names = dict(cfg.annotation_names)
	ann_obj = obj.get("annotation_names") or {}
	if not isinstance(ann_obj, dict):
		raise ConfigError("config 'annotation_names' must be a JSON object", loc=loc)
	for key, names in ann_obj.items():
		kind = _ANNOTATION_KEYS.get(key)
		if kind is None:
			raise ConfigError(f"unknown annotation kind '{key}' in config", loc=loc)
		got = _names(ann_obj, key, path)
		ann_names[kind] = got or ()

	return HimarkConfig(
		auto_traits=auto if auto is not None else cfg.auto_traits,
		markers=markers,
		ordinary_traits=ordinary,
		open_world=open_world,
		annotation_names=ann_names,
	)


def resolve_config(explicit: Optional[Path], *, cwd: Optional[Path] = None) -> HimarkConfig:
	"""Explicit path must exist; otherwise fall back to ./himark.json when present."""
	if explicit is not None:
		if not explicit.exists():
			raise ConfigError(f"config not found: {explicit}", loc=Span(file=str(explicit)))
		return load_config_json(explicit)
	default_path = (cwd or Path.cwd()) / DEFAULT_CONFIG_NAME
	if default_path.exists():
		return load_config_json(default_path)
	return HimarkConfig()


__all__ = ["DEFAULT_CONFIG_NAME", "HimarkConfig", "load_config_json", "resolve_config"]
