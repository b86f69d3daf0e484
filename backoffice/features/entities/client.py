from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

import httpx

from backoffice.core.config import Settings, get_settings
from backoffice.features.media.schemas import MediaDescriptor

from .errors import EntityApiError
from .types import ENTITY_RESOURCES, EntityResource

logger = logging.getLogger(__name__)


def _resource_for(entity_type: str) -> EntityResource:
    resource = ENTITY_RESOURCES.get(entity_type)
    if resource is None:
        raise EntityApiError(f"Unknown entity type '{entity_type}'.")
    return resource


def build_entity_body(
    entity_type: str,
    payload: dict[str, Any],
    media: Iterable[MediaDescriptor],
) -> dict[str, Any]:
    resource = _resource_for(entity_type)
    body = dict(payload)
    body[resource.media_field] = [item.model_dump(exclude_none=True) for item in media]
    return body


def _error_message(response: httpx.Response, fallback: str) -> str:
    try:
        body = response.json()
    except ValueError:
        return fallback
    if isinstance(body, dict):
        for key in ("message", "detail"):
            value = body.get(key)
            if isinstance(value, str) and value.strip():
                return value.strip()
    return fallback


class BusinessApiClient:
    """Creates and updates bundles, services and events on the business API."""

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> BusinessApiClient:
        resolved = settings or get_settings()
        client = httpx.AsyncClient(
            base_url=resolved.business_api_base_url,
            headers=resolved.auth_headers,
            timeout=resolved.upload_request_timeout_seconds,
        )
        return cls(client)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _send(
        self,
        method: str,
        url: str,
        body: dict[str, Any],
        *,
        expected_status: int,
        action: str,
    ) -> dict[str, Any]:
        try:
            response = await self._client.request(method, url, json=body)
        except httpx.HTTPError as exc:
            logger.warning("Business API request %s %s failed.", method, url, exc_info=True)
            raise EntityApiError(f"Error {action}: {exc}") from exc

        if response.status_code != expected_status:
            raise EntityApiError(
                _error_message(response, f"Error {action}"),
                status_code=response.status_code,
            )
        try:
            data = response.json()
        except ValueError:
            logger.info("Business API %s %s returned no JSON body.", method, url)
            return {}
        return data if isinstance(data, dict) else {"data": data}

    async def create_entity(
        self,
        entity_type: str,
        payload: dict[str, Any],
        media: Iterable[MediaDescriptor],
    ) -> dict[str, Any]:
        resource = _resource_for(entity_type)
        return await self._send(
            "POST",
            f"{resource.path}/",
            build_entity_body(entity_type, payload, media),
            expected_status=201,
            action=f"creating {entity_type}",
        )

    async def update_entity(
        self,
        entity_type: str,
        entity_id: str,
        payload: dict[str, Any],
        media: Iterable[MediaDescriptor],
    ) -> dict[str, Any]:
        resource = _resource_for(entity_type)
        return await self._send(
            "PUT",
            f"{resource.path}/{entity_id}",
            build_entity_body(entity_type, payload, media),
            expected_status=200,
            action=f"updating {entity_type}",
        )

    async def save_entity(
        self,
        entity_type: str,
        entity_id: str | None,
        payload: dict[str, Any],
        media: Iterable[MediaDescriptor],
    ) -> dict[str, Any]:
        if entity_id:
            return await self.update_entity(entity_type, entity_id, payload, media)
        return await self.create_entity(entity_type, payload, media)
