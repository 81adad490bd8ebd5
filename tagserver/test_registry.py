import asyncio

from tagserver.player import PlayerClient
from tagserver.registry import ClientRegistry


def test_add_find_and_overwrite(make_socket):
    registry = ClientRegistry()
    first = PlayerClient("a", make_socket())
    registry.add(first)
    assert registry.find("a") is first
    assert registry.find("b") is None

    second = PlayerClient("a", make_socket())
    registry.add(second)
    assert len(registry) == 1
    assert registry.find("a") is second


def test_remove(make_socket):
    registry = ClientRegistry()
    registry.add(PlayerClient("a", make_socket()))
    assert registry.remove("a") is True
    assert registry.remove("a") is False
    assert registry.find("a") is None


def test_remove_ignores_replaced_entry(make_socket):
    registry = ClientRegistry()
    old = PlayerClient("a", make_socket())
    registry.add(old)
    new = PlayerClient("a", make_socket())
    registry.add(new)
    assert registry.remove("a", old) is False
    assert registry.find("a") is new
    assert registry.remove("a", new) is True


def test_active_filters_without_removing(make_socket):
    registry = ClientRegistry()
    open_ws, closed_ws = make_socket(), make_socket()
    registry.add(PlayerClient("a", open_ws))
    registry.add(PlayerClient("b", closed_ws))
    registry.add(PlayerClient("c", make_socket()))
    asyncio.run(closed_ws.close())

    assert [c.id for c in registry.active()] == ["a", "c"]
    assert len(registry) == 3


def test_catchers(make_socket):
    registry = ClientRegistry()
    registry.add(PlayerClient("a", make_socket(), catcher=True))
    registry.add(PlayerClient("b", make_socket()))
    assert [c.id for c in registry.catchers()] == ["a"]


def test_teardown_closes_everything(make_socket):
    sockets = [make_socket() for _ in range(3)]

    async def scenario():
        async with ClientRegistry() as registry:
            for i, ws in enumerate(sockets):
                registry.add(PlayerClient(str(i), ws))
        return registry

    registry = asyncio.run(scenario())
    assert len(registry) == 0
    assert all(ws.state.name == "CLOSED" for ws in sockets)


def test_teardown_survives_failing_close(make_socket):
    class BrokenSocket:
        state = None

        async def close(self):
            raise OSError("already gone")

    good = make_socket()
    registry = ClientRegistry()
    registry.add(PlayerClient("bad", BrokenSocket()))
    registry.add(PlayerClient("good", good))
    asyncio.run(registry.close())
    assert good.state.name == "CLOSED"
