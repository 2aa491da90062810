"""
Consistency Resolver

Resolves a shot plan's identity references against the registry. Each
reference comes back with the identity's originally captured structured
description and seed, or flagged as ad hoc when there is nothing to reuse.

Resolution is a pure lookup: the registry is never modified and identical
inputs always produce equal outputs.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

from panelsmith.core.constants import (
    GENERIC_CHARACTER_ID,
    NEW_LOCATION_ID,
    IdentityKind,
    IdentityResolution,
)
from panelsmith.core.models import CharacterRef, LocationRef, ShotPlan, VisualIdentity
from panelsmith.core.structured_description import StructuredDescription

from .identity_registry import IdentityRegistry


@dataclass(frozen=True)
class _IdentityContext:
    resolution: IdentityResolution
    identity: Optional[VisualIdentity] = None
    is_master: bool = False

    @property
    def structured_description(self) -> Optional[StructuredDescription]:
        return self.identity.structured_description if self.identity else None

    @property
    def seed(self) -> Optional[int]:
        return self.identity.seed if self.identity else None

    @property
    def identity_id(self) -> Optional[str]:
        return self.identity.id if self.identity else None


@dataclass(frozen=True)
class CharacterContext(_IdentityContext):
    ref: Optional[CharacterRef] = None

    @property
    def name(self) -> str:
        if self.identity and self.identity.name:
            return self.identity.name
        return self.ref.name if self.ref else ""


@dataclass(frozen=True)
class LocationContext(_IdentityContext):
    ref: Optional[LocationRef] = None

    @property
    def name(self) -> str:
        if self.identity and self.identity.name:
            return self.identity.name
        return self.ref.name if self.ref else ""


@dataclass(frozen=True)
class ResolvedShot:
    """A shot plan with every identity reference resolved."""
    characters: Tuple[CharacterContext, ...] = ()
    location: Optional[LocationContext] = None

    @property
    def contributing(self) -> Tuple[_IdentityContext, ...]:
        """Characters in shot order, then the location."""
        return self.characters + ((self.location,) if self.location else ())

    @property
    def unresolved_refs(self) -> Tuple[str, ...]:
        refs = [c.ref.identity_ref for c in self.characters
                if c.resolution is IdentityResolution.UNRESOLVED]
        if self.location and self.location.resolution is IdentityResolution.UNRESOLVED:
            refs.append(self.location.ref.identity_ref)
        return tuple(refs)

    def to_dict(self) -> dict:
        def entry(ctx):
            return {
                "ref": ctx.ref.identity_ref,
                "resolution": ctx.resolution.value,
                "seed": ctx.seed,
                "hasDescription": ctx.structured_description is not None,
            }
        return {
            "characters": [entry(c) for c in self.characters],
            "location": entry(self.location) if self.location else None,
        }


def _lookup(
    registry: IdentityRegistry,
    kind: IdentityKind,
    identity_ref: str,
    sentinel: str,
) -> Tuple[IdentityResolution, Optional[VisualIdentity]]:
    if not identity_ref or identity_ref == sentinel:
        return IdentityResolution.AD_HOC, None
    identity = registry.get(kind, identity_ref)
    if identity is None:
        return IdentityResolution.UNRESOLVED, None
    return IdentityResolution.RESOLVED, identity


def resolve(shot: ShotPlan, registry: IdentityRegistry) -> ResolvedShot:
    """
    Resolve every identity reference of ``shot``.

    Unknown ids are not an error: they resolve to ``UNRESOLVED`` and are
    treated as freshly invented for this panel.
    """
    characters = []
    for ref in shot.characters:
        resolution, identity = _lookup(
            registry, IdentityKind.CHARACTER, ref.identity_ref, GENERIC_CHARACTER_ID
        )
        characters.append(CharacterContext(
            resolution=resolution,
            identity=identity,
            is_master=identity is not None and registry.is_master(identity),
            ref=ref,
        ))

    location = None
    if shot.location is not None:
        resolution, identity = _lookup(
            registry, IdentityKind.LOCATION, shot.location.identity_ref, NEW_LOCATION_ID
        )
        location = LocationContext(
            resolution=resolution,
            identity=identity,
            is_master=identity is not None and registry.is_master(identity),
            ref=shot.location,
        )

    return ResolvedShot(characters=tuple(characters), location=location)
