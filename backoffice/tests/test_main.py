from __future__ import annotations

import importlib

import pytest
from fastapi.testclient import TestClient


@pytest.mark.asyncio
async def test_lifespan_creates_registry_and_closes_dialogs_on_shutdown(monkeypatch):
    main = importlib.import_module("backoffice.main")
    closed: list[str] = []

    class _FakeClient:
        def __init__(self, name: str) -> None:
            self.name = name

        @classmethod
        def factory(cls, name: str):
            return lambda _settings: cls(name)

        async def aclose(self) -> None:
            closed.append(self.name)

    monkeypatch.setattr(main.MediaUploadClient, "from_settings", _FakeClient.factory("media"))
    monkeypatch.setattr(main.BusinessApiClient, "from_settings", _FakeClient.factory("business"))

    async with main.lifespan(main.app):
        registry = main.app.state.dialogs
        session = registry.open(entity_type="service")
        assert len(registry) == 1

    assert len(registry) == 0
    assert session.picker.closed is True
    assert closed == ["media", "business"]


def test_root_and_health_endpoints():
    main = importlib.import_module("backoffice.main")
    client = TestClient(main.app)

    assert client.get("/").json() == {"status": "ok", "service": "backoffice"}
    assert client.get("/health").json() == {"healthy": True}
