"""
Tests for the structured description merge and seed selection.
"""

from panelsmith.core.constants import IdentityKind
from panelsmith.core.models import CharacterRef, LocationRef, ShotPlan, VisualIdentity
from panelsmith.core.structured_description import STATIC_OBJECT_FIELDS, StructuredDescription
from panelsmith.references.consistency_resolver import resolve
from panelsmith.references.identity_registry import IdentityRegistry
from panelsmith.storyboard.merge import (
    SHOT_TYPE_FRAMING,
    SHOT_TYPE_SUBJECT_SIZE,
    in_frame_position,
    merge_shot,
    panel_orientation,
    select_seed,
)


def _shot(characters=(("c1", "running", "alarmed"),), location_id="l1",
          shot_type="action", camera_angle="low-angle", time_of_day="night", weather="rain") -> ShotPlan:
    return ShotPlan(
        panel_number=1,
        scene_description="Rex flees through the cave",
        characters=[CharacterRef(identity_ref=cid, name=cid.upper(), action=action, expression=expression)
                    for cid, action, expression in characters],
        location=LocationRef(identity_ref=location_id, name="Somewhere",
                             time_of_day=time_of_day, weather=weather),
        camera_angle=camera_angle,
        shot_type=shot_type,
    )


class TestMergeShot:

    def test_static_fields_copied_unchanged(self, registry, project_settings, rex_description):
        shot = _shot()
        description = merge_shot(shot, resolve(shot, registry), project_settings, "tense")

        original = StructuredDescription.from_dict(rex_description).primary_object
        merged = description.objects[0]
        for name in STATIC_OBJECT_FIELDS:
            assert getattr(merged, name) == getattr(original, name)
        assert merged.action == "running"
        assert merged.expression == "alarmed"
        assert merged.location == "center"

    def test_location_background_and_lighting(self, registry, project_settings):
        shot = _shot()
        description = merge_shot(shot, resolve(shot, registry), project_settings)

        assert description.background_setting == "A damp limestone cave lit by glowing crystals"
        assert description.lighting.direction == "Below"
        assert description.lighting.conditions.startswith("Dim night lighting")
        assert description.lighting.conditions.endswith("rain weather")

    def test_camera_angle_verbatim_and_framing_from_shot_type(self, registry, project_settings):
        shot = _shot(shot_type="reaction", camera_angle="dutch-angle")
        description = merge_shot(shot, resolve(shot, registry), project_settings)

        framing = SHOT_TYPE_FRAMING["reaction"]
        assert description.photographic_characteristics.camera_angle == "dutch-angle"
        assert description.photographic_characteristics.lens_focal_length == framing["lens_focal_length"]
        assert description.aesthetics.composition == framing["composition"]

    def test_project_style_applied(self, registry, project_settings):
        shot = _shot()
        description = merge_shot(shot, resolve(shot, registry), project_settings, "tense")

        assert description.artistic_style == "Bold ink comic style"
        assert description.aesthetics.color_scheme == "teal, orange"
        assert description.aesthetics.mood_atmosphere == "tense"
        assert description.missing_fields() == []

    def test_ad_hoc_character_is_invented(self, registry, project_settings):
        shot = _shot(characters=(("generic", "waving", "happy"),), location_id="new")
        description = merge_shot(shot, resolve(shot, registry), project_settings)

        invented = description.objects[0]
        assert invented.description == "GENERIC"
        assert invented.action == "waving"
        assert description.background_setting == "Somewhere"

    def test_scene_without_characters_keeps_one_object(self, registry, project_settings):
        shot = _shot(characters=())
        description = merge_shot(shot, resolve(shot, registry), project_settings)

        assert len(description.objects) == 1

    def test_characters_spread_across_frame(self):
        assert in_frame_position(0, 1) == "center"
        assert [in_frame_position(i, 2) for i in range(2)] == ["left", "right"]
        assert in_frame_position(7, 8) == "background"

    def test_orientation_and_size_set_per_panel(self, registry, project_settings, rex_description):
        shot = _shot(characters=(("c1", "walking away, back to camera", "calm"),),
                     shot_type="establishing", camera_angle="from behind")
        merged = merge_shot(shot, resolve(shot, registry), project_settings).objects[0]

        reference = rex_description["objects"][0]
        assert merged.orientation == "back to the viewer"
        assert merged.orientation != reference["orientation"]
        assert merged.relative_size == SHOT_TYPE_SUBJECT_SIZE["establishing"] == "small"
        assert merged.relative_size != reference["relative_size"]
        assert merged.clothing == reference["clothing"]

    def test_two_characters_turn_toward_each_other(self, registry, project_settings):
        shot = _shot(characters=(("c1", "talking", "stern"), ("generic", "listening", "nervous")),
                     shot_type="transition", camera_angle="eye-level")
        left, right = merge_shot(shot, resolve(shot, registry), project_settings).objects

        assert left.orientation == panel_orientation("talking", "eye-level", "left")
        assert "toward the right" in left.orientation
        assert "toward the left" in right.orientation
        assert left.relative_size == right.relative_size == "medium"

    def test_orientation_cues(self):
        assert panel_orientation("runs away", "low-angle", "center") == "back to the viewer"
        assert panel_orientation("looks up", "side view", "left") == "in profile"
        assert panel_orientation("smiles", "eye-level", "center") == "facing the viewer"


class TestSelectSeed:

    def _registry(self, *seeds, location_seed=None):
        registry = IdentityRegistry()
        for index, seed in enumerate(seeds, 1):
            registry.register(VisualIdentity(id=f"c{index}", name=f"C{index}",
                                             kind=IdentityKind.CHARACTER, seed=seed))
        registry.register(VisualIdentity(id="l1", name="Cave", kind=IdentityKind.LOCATION,
                                         seed=location_seed))
        return registry

    def test_shared_seed_reused(self):
        registry = self._registry(42, location_seed=42)
        seed, reason = select_seed(resolve(_shot(), registry))

        assert seed == 42
        assert reason == "shared identity seed"

    def test_omitted_when_any_identity_lacks_seed(self):
        registry = self._registry(42, location_seed=None)

        assert select_seed(resolve(_shot(), registry))[0] is None

    def test_omitted_for_ad_hoc_identities(self):
        registry = self._registry(42, location_seed=42)
        shot = _shot(characters=(("c1", "", ""), ("generic", "", "")))

        assert select_seed(resolve(shot, registry))[0] is None

    def test_diverging_seeds_prefer_master(self):
        # c1 registered first with a seed, so it is the master
        registry = self._registry(7, 42, location_seed=99)
        shot = _shot(characters=(("c2", "", ""), ("c1", "", "")))

        seed, reason = select_seed(resolve(shot, registry))

        assert seed == 7
        assert reason == "master identity"

    def test_diverging_seeds_without_master_use_first_character(self):
        registry = self._registry(7, 42, location_seed=99)
        shot = _shot(characters=(("c2", "", ""),))

        assert select_seed(resolve(shot, registry)) == (42, "first identity in shot order")
