from __future__ import annotations

import asyncio
import json

from identity_store.config import StoreSettings
from identity_store.events import EventPublisher, IdentityEvent, LifecycleAction
from identity_store.models import User


class _FakeNats:
    def __init__(self, fail: bool = False) -> None:
        self.is_connected = True
        self.fail = fail
        self.published: list[tuple[str, bytes]] = []
        self.drained = False

    async def publish(self, subject: str, payload: bytes) -> None:
        if self.fail:
            raise RuntimeError("broken pipe")
        self.published.append((subject, payload))

    async def drain(self) -> None:
        self.drained = True
        self.is_connected = False


def _event() -> IdentityEvent:
    user = User(login_name="alice")
    return IdentityEvent(
        name="user.created",
        action=LifecycleAction.CREATED,
        discriminator="USER",
        key=user.key,
        payload=user.model_dump(mode="json", exclude={"attributes"}),
    )


def _publisher(client=None, **overrides) -> EventPublisher:
    publisher = EventPublisher(StoreSettings(_env_file=None, **overrides))
    publisher._nc = client
    return publisher


def test_event_published_as_json_under_prefixed_subject():
    client = _FakeNats()
    publisher = _publisher(client, event_subject_prefix="iam")

    assert asyncio.run(publisher.publish(_event())) is True

    [(subject, payload)] = client.published
    assert subject == "iam.user.created"
    body = json.loads(payload)
    assert body["key"] == "USER://alice"
    assert body["action"] == "created"
    assert body["payload"]["login_name"] == "alice"


def test_publish_failure_is_swallowed():
    publisher = _publisher(_FakeNats(fail=True))
    assert asyncio.run(publisher.publish(_event())) is False


def test_unavailable_nats_skips_event(monkeypatch):
    async def _refuse(url):
        raise ConnectionRefusedError(url)

    monkeypatch.setattr("identity_store.events.nats.connect", _refuse)
    publisher = _publisher()

    assert asyncio.run(publisher.publish(_event())) is False
    assert publisher._nc is None


def test_disconnect_drains_connection():
    client = _FakeNats()
    publisher = _publisher(client)

    asyncio.run(publisher.disconnect())

    assert client.drained is True
    assert publisher._nc is None
