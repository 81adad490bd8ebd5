import asyncio

import pytest
from websockets.protocol import State


class MockWebSocket:
    """Stand-in for a server-side websocket connection."""

    def __init__(self, messages=(), error=None, send_error=None):
        self.messages = list(messages)
        self.error = error
        self.send_error = send_error
        self.sent = []
        self.state = State.OPEN
        self.gate = None

    async def send(self, payload):
        if self.gate is not None:
            await self.gate.wait()
        if self.send_error is not None:
            raise self.send_error
        self.sent.append(payload)

    async def close(self):
        self.state = State.CLOSED

    def __aiter__(self):
        return self._receive()

    async def _receive(self):
        for message in self.messages:
            yield message
        if self.error is not None:
            raise self.error


class FakeClock:
    def __init__(self, now=100.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


async def settle():
    """Let scheduled send tasks run"""
    for _ in range(3):
        await asyncio.sleep(0)


@pytest.fixture
def make_socket():
    return MockWebSocket


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def settle_sends():
    return settle
