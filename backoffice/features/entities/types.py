from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

EntityType = Literal["bundle", "service", "event"]


@dataclass(frozen=True)
class EntityResource:
    path: str
    media_field: str


ENTITY_RESOURCES: dict[str, EntityResource] = {
    "bundle": EntityResource(path="/bundles", media_field="files"),
    "service": EntityResource(path="/services", media_field="media"),
    "event": EntityResource(path="/events", media_field="media"),
}
