"""Pytest fixtures shared by the bridge tests."""

import asyncio

import pytest

from canvasbridge.nucleus.bridge import CanvasBridge
from canvasbridge.nucleus.protocol import CommandEnvelope
from canvasbridge.renderer.canvas import HeadlessCanvas
from canvasbridge.renderer.executor import CommandExecutor


class FakeRendererSocket:
    """
    Stands in for the renderer's websocket. Records every envelope sent to it
    and, when given an executor, answers on the next loop iteration the way a
    real renderer would.
    """

    def __init__(self, bridge, executor=None):
        self.bridge = bridge
        self.executor = executor
        self.sent = []
        self.remote_address = ("127.0.0.1", 50000)

    async def send(self, message):
        envelope = CommandEnvelope.model_validate_json(message)
        self.sent.append(envelope)
        if self.executor is not None:
            reply = self.executor.execute(envelope)
            asyncio.get_running_loop().call_soon(self.bridge.resolve, reply)


@pytest.fixture
def bridge():
    return CanvasBridge(timeout=0.2)


@pytest.fixture
def canvas():
    return HeadlessCanvas()


@pytest.fixture
def silent_renderer(bridge):
    """A connected renderer that never replies."""
    socket = FakeRendererSocket(bridge)
    bridge.renderer_connected(socket)
    return socket


@pytest.fixture
def renderer(bridge, canvas):
    """A connected renderer backed by a headless canvas."""
    socket = FakeRendererSocket(bridge, CommandExecutor(canvas))
    bridge.renderer_connected(socket)
    return socket


@pytest.fixture
def make_socket():
    """Builds extra fake renderer sockets for tests that need more than one."""
    return FakeRendererSocket
