# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Trait registry interface.

The host compiler owns the registry; the engine only queries it through
`classify`. `StaticTraitRegistry` is an in-memory implementation used by the
command-line driver and by tests.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import FrozenSet, Iterable, Protocol, Union

from himark.decl.model import TraitClass, TraitReference, TypePath

# Compiler-provided auto traits treated as marker-qualified by default.
DEFAULT_AUTO_TRAITS: FrozenSet[str] = frozenset({"Send", "Sync", "Unpin", "UnwindSafe", "RefUnwindSafe"})

# Paths under which the default auto traits live; `std::marker::Send` and
# `core::marker::Send` resolve like `Send`.
_AUTO_TRAIT_ROOTS: FrozenSet[str] = frozenset({"std", "core", "alloc"})


class TraitRegistry(Protocol):
	def classify(self, path: TypePath) -> TraitClass:
		...


TraitName = Union[str, TypePath, TraitReference]


def trait_path_key(path: TraitName) -> str:
	"""Registry key for a trait path: `::`-joined segments, generic args dropped."""
	if isinstance(path, TraitReference):
		path = path.path
	if isinstance(path, TypePath):
		return "::".join(path.segments)
	text = path.strip()
	return text[2:] if text.startswith("::") else text


@dataclass(frozen=True)
class StaticTraitRegistry:
	"""
	In-memory registry.

	Unqualified names match qualified registrations by final segment and the
	reverse, so `Send` and `std::marker::Send` resolve the same way. User
	markers win over ordinary traits when a name is registered as both.
	"""

	auto_traits: FrozenSet[str] = DEFAULT_AUTO_TRAITS
	markers: FrozenSet[str] = frozenset()
	ordinary: FrozenSet[str] = frozenset()
	# When set, names not registered anywhere are ORDINARY instead of UNRESOLVED.
	open_world: bool = False
	_by_last: dict = field(default_factory=dict, init=False, repr=False, compare=False)
	_auto_last: frozenset = field(default_factory=frozenset, init=False, repr=False, compare=False)

	def __post_init__(self) -> None:
		# Auto traits are kept apart: only `std`, `core` and `alloc` paths may
		# reach them by final segment.
		index: dict[str, TraitClass] = {}
		for names, cls in ((self.ordinary, TraitClass.ORDINARY), (self.markers, TraitClass.USER_MARKER)):
			for name in names:
				index[trait_path_key(name).split("::")[-1]] = cls
		object.__setattr__(self, "_by_last", index)
		auto_last = frozenset(trait_path_key(n).split("::")[-1] for n in self.auto_traits)
		object.__setattr__(self, "_auto_last", auto_last)

	@classmethod
	def build(
		cls,
		*,
		auto_traits: Iterable[str] | None = None,
		markers: Iterable[str] = (),
		ordinary: Iterable[str] = (),
		open_world: bool = False,
	) -> "StaticTraitRegistry":
		return cls(
			auto_traits=frozenset(trait_path_key(n) for n in auto_traits) if auto_traits is not None else DEFAULT_AUTO_TRAITS,
			markers=frozenset(trait_path_key(n) for n in markers),
			ordinary=frozenset(trait_path_key(n) for n in ordinary),
			open_world=open_world,
		)

	def with_markers(self, names: Iterable[TraitName]) -> "StaticTraitRegistry":
		"""Return a registry that also knows `names` as user markers."""
		return replace(self, markers=self.markers | {trait_path_key(n) for n in names})

	def with_ordinary(self, names: Iterable[TraitName]) -> "StaticTraitRegistry":
		return replace(self, ordinary=self.ordinary | {trait_path_key(n) for n in names})

	def classify(self, path: TypePath) -> TraitClass:
		key = trait_path_key(path)
		for names, cls in (
			(self.markers, TraitClass.USER_MARKER),
			(self.auto_traits, TraitClass.COMPILER_AUTO),
			(self.ordinary, TraitClass.ORDINARY),
		):
			if key in names:
				return cls
		segments = key.split("::")
		if len(segments) > 1:
			last = segments[-1]
			if last in self._auto_last and segments[0] in _AUTO_TRAIT_ROOTS:
				return TraitClass.COMPILER_AUTO
			# Qualified user paths (`crate::tags::Array`) resolve by final segment.
			if segments[0] not in _AUTO_TRAIT_ROOTS and last in self._by_last:
				return self._by_last[last]
		else:
			cls = self._by_last.get(key)
			if cls is TraitClass.USER_MARKER:
				return cls
			if key in self._auto_last:
				return TraitClass.COMPILER_AUTO
			if cls is not None:
				return cls
		return TraitClass.ORDINARY if self.open_world else TraitClass.UNRESOLVED


__all__ = [
	"DEFAULT_AUTO_TRAITS",
	"TraitRegistry",
	"StaticTraitRegistry",
	"trait_path_key",
]
