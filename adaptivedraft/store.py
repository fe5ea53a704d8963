"""Entity store interface used by the tools, and an in-memory implementation."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Dict, Iterable, List, Mapping, Optional, Protocol, Set, runtime_checkable

from .errors import SelectionInvalid
from .kernel.entities import Entity, EntityKind

log = logging.getLogger("adaptivedraft.tools")


@runtime_checkable
class EntityStore(Protocol):
    """What a host document must provide to the drafting tools."""

    active_layer: str

    def add_entity(self, entity: Entity) -> str: ...

    def update_entity(self, entity_id: str, patch: Mapping[str, object]) -> None: ...

    def delete_entity(self, entity_id: str) -> None: ...

    def get_entity(self, entity_id: str) -> Optional[Entity]: ...

    def entities(self, kind: Optional[EntityKind] = None) -> Mapping[str, Entity]: ...

    def select_entities(self, ids: Iterable[str]) -> None: ...

    def clear_selection(self) -> None: ...

    def set_command_prompt(self, text: str) -> None: ...


class MemoryEntityStore:
    """Dictionary backed store with sequential ids ("e1", "e2", ...)."""

    def __init__(self, active_layer: str = "0") -> None:
        self.active_layer = active_layer
        self._entities: Dict[str, Entity] = {}
        self._next_id = 1
        self.selection: Set[str] = set()
        self.prompts: List[str] = []

    def add_entity(self, entity: Entity) -> str:
        entity_id = f"e{self._next_id}"
        self._next_id += 1
        self._entities[entity_id] = entity
        log.debug("store: added %s %s", entity.kind.value, entity_id)
        return entity_id

    def update_entity(self, entity_id: str, patch: Mapping[str, object]) -> None:
        current = self._entities.get(entity_id)
        if current is None:
            raise SelectionInvalid(f"No entity with id {entity_id!r}")
        self._entities[entity_id] = replace(current, **patch)

    def delete_entity(self, entity_id: str) -> None:
        if self._entities.pop(entity_id, None) is None:
            raise SelectionInvalid(f"No entity with id {entity_id!r}")
        self.selection.discard(entity_id)

    def get_entity(self, entity_id: str) -> Optional[Entity]:
        return self._entities.get(entity_id)

    def entities(self, kind: Optional[EntityKind] = None) -> Mapping[str, Entity]:
        if kind is None:
            return dict(self._entities)
        return {k: e for k, e in self._entities.items() if e.kind is kind}

    def select_entities(self, ids: Iterable[str]) -> None:
        self.selection = {i for i in ids if i in self._entities}

    def clear_selection(self) -> None:
        self.selection.clear()

    def set_command_prompt(self, text: str) -> None:
        self.prompts.append(text)

    @property
    def prompt(self) -> str:
        return self.prompts[-1] if self.prompts else ""

    def __len__(self) -> int:
        return len(self._entities)

    def __contains__(self, entity_id: object) -> bool:
        return entity_id in self._entities
