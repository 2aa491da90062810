"""
Identity Registry

Project-scoped store of VisualIdentities. Characters and locations live in
separate id-keyed maps, so a character reference can never resolve to a
location with the same id.

The first identity registered with a seed becomes the master identity. Its
seed is the canonical one that later seedless identities may inherit.
"""

from dataclasses import replace
from typing import Dict, Iterator, List, Optional, Tuple

from panelsmith.core.constants import IdentityKind
from panelsmith.core.logging_config import get_logger
from panelsmith.core.models import ProjectSettings, VisualIdentity
from panelsmith.core.structured_description import StructuredDescription

logger = get_logger("references.registry")


class IdentityRegistry:
    """
    Registry of characters and locations for one project session.

    Identities are immutable once registered; ``regenerate`` is the only way
    to replace a captured description and seed.
    """

    def __init__(self):
        self._identities: Dict[IdentityKind, Dict[str, VisualIdentity]] = {
            IdentityKind.CHARACTER: {},
            IdentityKind.LOCATION: {},
        }
        self._master_key: Optional[Tuple[IdentityKind, str]] = None

    @classmethod
    def from_settings(cls, settings: ProjectSettings) -> "IdentityRegistry":
        """Build a registry from project settings, characters first."""
        registry = cls()
        for identity in list(settings.characters) + list(settings.locations):
            if registry.get(identity.kind, identity.id) is not None:
                logger.warning(f"Duplicate {identity.kind.value} id '{identity.id}' ignored")
                continue
            registry.register(identity, inherit_master_seed=False)
        return registry

    # -------------------------------------------------------------------------
    # Lookup
    # -------------------------------------------------------------------------

    def get(self, kind: IdentityKind, identity_id: str) -> Optional[VisualIdentity]:
        return self._identities[kind].get(identity_id)

    def get_character(self, identity_id: str) -> Optional[VisualIdentity]:
        return self.get(IdentityKind.CHARACTER, identity_id)

    def get_location(self, identity_id: str) -> Optional[VisualIdentity]:
        return self.get(IdentityKind.LOCATION, identity_id)

    @property
    def characters(self) -> List[VisualIdentity]:
        return list(self._identities[IdentityKind.CHARACTER].values())

    @property
    def locations(self) -> List[VisualIdentity]:
        return list(self._identities[IdentityKind.LOCATION].values())

    @property
    def master(self) -> Optional[VisualIdentity]:
        """The identity owning the canonical seed, if any identity has a seed."""
        if self._master_key is None:
            return None
        return self.get(*self._master_key)

    def is_master(self, identity: VisualIdentity) -> bool:
        return self._master_key == (identity.kind, identity.id)

    def __len__(self) -> int:
        return sum(len(m) for m in self._identities.values())

    def __iter__(self) -> Iterator[VisualIdentity]:
        yield from self.characters
        yield from self.locations

    # -------------------------------------------------------------------------
    # Mutation
    # -------------------------------------------------------------------------

    def register(self, identity: VisualIdentity, inherit_master_seed: bool = False) -> VisualIdentity:
        """
        Add a new identity.

        Args:
            identity: Identity to store (a copy is kept)
            inherit_master_seed: Give a seedless identity the master identity's seed

        Returns:
            The stored identity

        Raises:
            ValueError: An identity of the same kind and id already exists
        """
        bucket = self._identities[identity.kind]
        if identity.id in bucket:
            raise ValueError(
                f"{identity.kind.value.capitalize()} '{identity.id}' is already registered; "
                f"use regenerate() to replace it"
            )

        stored = replace(identity)
        master = self.master
        if inherit_master_seed and stored.seed is None and master is not None:
            stored = replace(stored, seed=master.seed)
            logger.debug(f"'{stored.id}' inherits master seed {master.seed} from '{master.id}'")

        bucket[stored.id] = stored
        if self._master_key is None and stored.seed is not None:
            self._master_key = (stored.kind, stored.id)
            logger.info(f"Master identity set to {stored.kind.value} '{stored.id}' (seed {stored.seed})")
        return stored

    def regenerate(
        self,
        kind: IdentityKind,
        identity_id: str,
        structured_description: Optional[StructuredDescription],
        seed: Optional[int],
    ) -> VisualIdentity:
        """
        Replace an identity's captured description and seed.

        Raises:
            KeyError: No identity of that kind and id
        """
        current = self.get(kind, identity_id)
        if current is None:
            raise KeyError(f"Unknown {kind.value} '{identity_id}'")

        updated = replace(current, structured_description=structured_description, seed=seed)
        self._identities[kind][identity_id] = updated
        if self._master_key is None and seed is not None:
            self._master_key = (kind, identity_id)
        logger.info(f"Regenerated {kind.value} '{identity_id}' (seed {seed})")
        return updated
