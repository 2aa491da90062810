"""
Structured Description

Typed rendition of the schema-constrained scene description exchanged with the
image synthesis capability. Known fields are typed; anything else the
capability sends back is preserved in ``extras`` so round trips are lossless.

Scene objects split their fields into STATIC identity traits (what a character
or prop looks like) and DYNAMIC panel traits (what it is doing in this shot).
``SceneObject.with_pose`` only accepts dynamic fields, so merging a stored
identity into a new panel can never rewrite how the identity looks.
"""

import json
from dataclasses import dataclass, field, fields, replace
from typing import Any, Dict, List, Optional, Tuple, Union

STATIC_OBJECT_FIELDS: Tuple[str, ...] = (
    "description",
    "shape_and_color",
    "texture",
    "appearance_details",
    "clothing",
    "material",
)

DYNAMIC_OBJECT_FIELDS: Tuple[str, ...] = (
    "action",
    "pose",
    "expression",
    "location",
    "orientation",
    "relationship",
    "relative_size",
)

# Always serialized, even when empty
_CORE_OBJECT_FIELDS = (
    "description", "location", "relationship", "relative_size",
    "shape_and_color", "texture", "appearance_details", "action", "orientation",
)

REQUIRED_TOP_LEVEL_FIELDS: Tuple[str, ...] = (
    "objects",
    "background_setting",
    "lighting",
    "aesthetics",
    "photographic_characteristics",
    "style_medium",
    "artistic_style",
)


def _known_names(cls) -> List[str]:
    return [f.name for f in fields(cls) if f.name != "extras"]


def _split_known(cls, data: Dict[str, Any]) -> Tuple[Dict[str, Any], Dict[str, Any]]:
    known = _known_names(cls)
    values = {k: ("" if v is None else str(v)) for k, v in data.items() if k in known}
    extras = {k: v for k, v in data.items() if k not in known}
    return values, extras


def _overwrite(record, changes: Dict[str, Any]):
    """Overwrite-by-field: every non-None value in ``changes`` replaces the record's field."""
    known = _known_names(type(record))
    unknown = [k for k in changes if k not in known]
    if unknown:
        raise ValueError(f"Unknown fields for {type(record).__name__}: {unknown}")
    return replace(record, **{k: v for k, v in changes.items() if v is not None})


@dataclass(frozen=True)
class SceneObject:
    """One character or object placed in the scene."""
    description: str = ""
    shape_and_color: str = ""
    texture: str = ""
    appearance_details: str = ""
    clothing: str = ""
    material: str = ""
    action: str = ""
    pose: str = ""
    expression: str = ""
    location: str = ""
    orientation: str = ""
    relationship: str = ""
    relative_size: str = ""
    extras: Dict[str, Any] = field(default_factory=dict, compare=False)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SceneObject":
        values, extras = _split_known(cls, data or {})
        return cls(**values, extras=extras)

    def to_dict(self) -> Dict[str, Any]:
        data = dict(self.extras)
        for name in _known_names(SceneObject):
            value = getattr(self, name)
            if value or name in _CORE_OBJECT_FIELDS:
                data[name] = value
        return data

    def static_fields(self) -> Dict[str, str]:
        return {name: getattr(self, name) for name in STATIC_OBJECT_FIELDS}

    def dynamic_fields(self) -> Dict[str, str]:
        return {name: getattr(self, name) for name in DYNAMIC_OBJECT_FIELDS}

    def with_pose(self, **changes: Optional[str]) -> "SceneObject":
        """Return a copy with panel-specific (dynamic) fields replaced."""
        static = [k for k in changes if k not in DYNAMIC_OBJECT_FIELDS]
        if static:
            raise ValueError(f"Cannot override static identity fields: {static}")
        return _overwrite(self, changes)


@dataclass(frozen=True)
class Lighting:
    conditions: str = ""
    direction: str = ""
    shadows: str = ""
    extras: Dict[str, Any] = field(default_factory=dict, compare=False)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Lighting":
        values, extras = _split_known(cls, data or {})
        return cls(**values, extras=extras)

    def to_dict(self) -> Dict[str, Any]:
        return {**self.extras, "conditions": self.conditions,
                "direction": self.direction, "shadows": self.shadows}

    def overwrite(self, **changes) -> "Lighting":
        return _overwrite(self, changes)


@dataclass(frozen=True)
class Aesthetics:
    composition: str = ""
    color_scheme: str = ""
    mood_atmosphere: str = ""
    extras: Dict[str, Any] = field(default_factory=dict, compare=False)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Aesthetics":
        values, extras = _split_known(cls, data or {})
        return cls(**values, extras=extras)

    def to_dict(self) -> Dict[str, Any]:
        return {**self.extras, "composition": self.composition,
                "color_scheme": self.color_scheme, "mood_atmosphere": self.mood_atmosphere}

    def overwrite(self, **changes) -> "Aesthetics":
        return _overwrite(self, changes)


@dataclass(frozen=True)
class PhotographicCharacteristics:
    depth_of_field: str = ""
    focus: str = ""
    camera_angle: str = ""
    lens_focal_length: str = ""
    extras: Dict[str, Any] = field(default_factory=dict, compare=False)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PhotographicCharacteristics":
        values, extras = _split_known(cls, data or {})
        return cls(**values, extras=extras)

    def to_dict(self) -> Dict[str, Any]:
        return {**self.extras, "depth_of_field": self.depth_of_field, "focus": self.focus,
                "camera_angle": self.camera_angle, "lens_focal_length": self.lens_focal_length}

    def overwrite(self, **changes) -> "PhotographicCharacteristics":
        return _overwrite(self, changes)


@dataclass(frozen=True)
class StructuredDescription:
    """Complete scene description sent to the image synthesis capability."""
    short_description: str = ""
    objects: Tuple[SceneObject, ...] = ()
    background_setting: str = ""
    lighting: Lighting = field(default_factory=Lighting)
    aesthetics: Aesthetics = field(default_factory=Aesthetics)
    photographic_characteristics: PhotographicCharacteristics = field(default_factory=PhotographicCharacteristics)
    style_medium: str = ""
    context: str = ""
    artistic_style: str = ""
    extras: Dict[str, Any] = field(default_factory=dict, compare=False)

    @classmethod
    def from_dict(cls, data: Union[Dict[str, Any], str, None]) -> Optional["StructuredDescription"]:
        """Parse a capability payload (dict or JSON string). Returns None for empty input."""
        if not data:
            return None
        if isinstance(data, str):
            try:
                data = json.loads(data)
            except json.JSONDecodeError:
                return None
        if not isinstance(data, dict):
            return None

        nested = {"objects", "lighting", "aesthetics", "photographic_characteristics"}
        flat = {k: v for k, v in data.items() if k not in nested}
        values, extras = _split_known(cls, flat)
        for name in nested:
            values.pop(name, None)

        return cls(
            **values,
            objects=tuple(SceneObject.from_dict(o) for o in data.get("objects") or [] if isinstance(o, dict)),
            lighting=Lighting.from_dict(data.get("lighting") or {}),
            aesthetics=Aesthetics.from_dict(data.get("aesthetics") or {}),
            photographic_characteristics=PhotographicCharacteristics.from_dict(
                data.get("photographic_characteristics") or {}
            ),
            extras=extras,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            **self.extras,
            "short_description": self.short_description,
            "objects": [obj.to_dict() for obj in self.objects],
            "background_setting": self.background_setting,
            "lighting": self.lighting.to_dict(),
            "aesthetics": self.aesthetics.to_dict(),
            "photographic_characteristics": self.photographic_characteristics.to_dict(),
            "style_medium": self.style_medium,
            "context": self.context,
            "artistic_style": self.artistic_style,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @property
    def primary_object(self) -> Optional[SceneObject]:
        """The object that carries an identity's look (first entry)."""
        return self.objects[0] if self.objects else None

    def missing_fields(self) -> List[str]:
        """Required top-level fields that are still empty."""
        missing = []
        for name in REQUIRED_TOP_LEVEL_FIELDS:
            value = getattr(self, name)
            if isinstance(value, str) and not value:
                missing.append(name)
            elif name == "objects" and not value:
                missing.append(name)
        return missing

    def overwrite(self, **changes) -> "StructuredDescription":
        """Overwrite-by-field merge of top-level values."""
        if "objects" in changes and changes["objects"] is not None:
            changes["objects"] = tuple(changes["objects"])
        return _overwrite(self, changes)
