"""
Tests for the identity registry and the consistency resolver.
"""

import copy

import pytest

from panelsmith.core.constants import IdentityKind, IdentityResolution
from panelsmith.core.models import CharacterRef, LocationRef, ProjectSettings, ShotPlan, VisualIdentity
from panelsmith.references.consistency_resolver import resolve
from panelsmith.references.identity_registry import IdentityRegistry


def _shot(*character_ids, location_id="l1") -> ShotPlan:
    return ShotPlan(
        panel_number=1,
        scene_description="Rex looks around",
        characters=[CharacterRef(identity_ref=cid, action="looking", expression="curious")
                    for cid in character_ids],
        location=LocationRef(identity_ref=location_id) if location_id is not None else None,
    )


class TestIdentityRegistry:

    def test_from_settings(self, registry):
        assert [c.id for c in registry.characters] == ["c1"]
        assert [loc.id for loc in registry.locations] == ["l1"]
        assert registry.get_character("c1").seed == 42
        # Legacy key parsed for the location
        assert registry.get_location("l1").structured_description.background_setting.startswith("A damp")

    def test_kinds_are_separate(self, registry):
        assert registry.get_character("l1") is None
        assert registry.get_location("c1") is None

    def test_first_seeded_identity_is_master(self, registry):
        assert registry.master.id == "c1"

        registry.register(VisualIdentity(id="c2", name="Mira", kind=IdentityKind.CHARACTER, seed=7))

        assert registry.master.id == "c1"

    def test_master_seed_inherited_on_request(self, registry):
        inheriting = registry.register(
            VisualIdentity(id="c2", name="Mira", kind=IdentityKind.CHARACTER),
            inherit_master_seed=True,
        )
        independent = registry.register(
            VisualIdentity(id="c3", name="Tor", kind=IdentityKind.CHARACTER),
        )

        assert inheriting.seed == 42
        assert independent.seed is None

    def test_duplicate_registration_rejected(self, registry):
        with pytest.raises(ValueError):
            registry.register(VisualIdentity(id="c1", name="Other Rex", kind=IdentityKind.CHARACTER))

    def test_duplicate_settings_entries_ignored(self):
        settings = ProjectSettings.from_dict({"characters": [
            {"id": "c1", "name": "Rex", "seed": 1},
            {"id": "c1", "name": "Impostor", "seed": 2},
        ]})

        registry = IdentityRegistry.from_settings(settings)

        assert len(registry) == 1
        assert registry.get_character("c1").name == "Rex"

    def test_regenerate_replaces_captured_data(self, registry):
        updated = registry.regenerate(IdentityKind.LOCATION, "l1", None, 99)

        assert updated.seed == 99
        assert registry.get_location("l1").structured_description is None

    def test_regenerate_unknown(self, registry):
        with pytest.raises(KeyError):
            registry.regenerate(IdentityKind.CHARACTER, "nobody", None, 1)


class TestConsistencyResolver:

    def test_resolves_registered_identities(self, registry):
        resolved = resolve(_shot("c1"), registry)

        rex = resolved.characters[0]
        assert rex.resolution is IdentityResolution.RESOLVED
        assert rex.seed == 42
        assert rex.is_master
        assert rex.structured_description.primary_object.texture == "Rough scaly skin"
        assert resolved.location.resolution is IdentityResolution.RESOLVED
        assert resolved.location.seed is None

    def test_sentinels_are_ad_hoc(self, registry):
        resolved = resolve(_shot("generic", location_id="new"), registry)

        assert resolved.characters[0].resolution is IdentityResolution.AD_HOC
        assert resolved.characters[0].structured_description is None
        assert resolved.location.resolution is IdentityResolution.AD_HOC
        assert resolved.unresolved_refs == ()

    def test_unknown_ids_flagged_not_conflated(self, registry):
        resolved = resolve(_shot("c9", location_id="c1"), registry)

        assert resolved.characters[0].resolution is IdentityResolution.UNRESOLVED
        assert resolved.characters[0].seed is None
        # A character id never resolves as a location
        assert resolved.location.resolution is IdentityResolution.UNRESOLVED
        assert resolved.unresolved_refs == ("c9", "c1")

    def test_resolve_is_idempotent_and_pure(self, registry):
        shot = _shot("c1", "generic")
        before = copy.deepcopy([i.to_dict() for i in registry])

        first = resolve(shot, registry)
        second = resolve(shot, registry)

        assert first == second
        assert [i.to_dict() for i in registry] == before

    def test_no_location(self, registry):
        resolved = resolve(_shot("c1", location_id=None), registry)

        assert resolved.location is None
        assert len(resolved.contributing) == 1
