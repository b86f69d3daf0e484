from .client import BusinessApiClient, build_entity_body
from .errors import EntityApiError
from .types import ENTITY_RESOURCES, EntityResource, EntityType

__all__ = [
    "BusinessApiClient",
    "ENTITY_RESOURCES",
    "EntityApiError",
    "EntityResource",
    "EntityType",
    "build_entity_body",
]
