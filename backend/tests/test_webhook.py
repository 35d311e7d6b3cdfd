"""Tests for the webhook notifier against a local aiohttp server."""

import asyncio
import socket
import uuid
from types import SimpleNamespace
from typing import List

import pytest_asyncio
from aiohttp import web
from aiohttp import test_utils

from relay.publishing import PUBLISHED_EVENT, WebhookNotifier


@pytest_asyncio.fixture
async def listener():
    """Local webhook listener recording every JSON body it receives."""
    received: List[dict] = []
    state = {"status": 200, "delay": 0.0}

    async def handle(request: web.Request) -> web.Response:
        received.append(await request.json())
        if state["delay"]:
            await asyncio.sleep(state["delay"])
        return web.Response(status=state["status"])

    app = web.Application()
    app.router.add_post("/hook", handle)
    server = test_utils.TestServer(app)
    await server.start_server()
    yield SimpleNamespace(url=str(server.make_url("/hook")), received=received, state=state)
    await server.close()


def free_port_url() -> str:
    with socket.socket() as sock:
        sock.bind(("127.0.0.1", 0))
        port = sock.getsockname()[1]
    return f"http://127.0.0.1:{port}/hook"


async def test_notify_published_sends_post_fields(listener):
    notifier = WebhookNotifier(listener.url)
    post = SimpleNamespace(id=uuid.uuid4(), title="Hello", collection="blog", slug="hello")

    try:
        delivered = await notifier.notify_published(post)
    finally:
        await notifier.close()

    assert delivered is True
    assert listener.received == [{
        "event": PUBLISHED_EVENT,
        "post": {"id": str(post.id), "title": "Hello", "collection": "blog", "slug": "hello"},
    }]


async def test_notify_returns_false_on_error_status(listener):
    listener.state["status"] = 500
    notifier = WebhookNotifier(listener.url)

    try:
        assert await notifier.notify("post.published", {"post": {}}) is False
    finally:
        await notifier.close()


async def test_notify_returns_false_on_timeout(listener):
    listener.state["delay"] = 1.0
    notifier = WebhookNotifier(listener.url, timeout_seconds=0.1)

    try:
        assert await notifier.notify("post.published", {}) is False
    finally:
        await notifier.close()


async def test_notify_returns_false_when_unreachable():
    notifier = WebhookNotifier(free_port_url(), timeout_seconds=1.0)

    try:
        assert await notifier.notify("post.published", {}) is False
    finally:
        await notifier.close()


def test_from_settings(settings):
    configured = settings.model_copy(update={
        "webhook_enabled": True,
        "webhook_url": "http://hooks.test/publish",
        "webhook_timeout_seconds": 2.5,
    })

    notifier = WebhookNotifier.from_settings(configured)

    assert notifier.url == "http://hooks.test/publish"
    assert notifier.timeout_seconds == 2.5
    assert notifier.user_agent == "Relay/1.0.0"
