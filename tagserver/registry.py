# tagserver/registry.py
import asyncio
from typing import Dict, Iterator, List, Optional

from .player import PlayerClient


class ClientRegistry:
    """Tracks live player connections keyed by client ID.

    Entries leave the registry only through `remove`, which the connection
    handler calls when the socket closes. `active()` filters out sockets that
    are already closed but never deletes anything itself.
    """

    def __init__(self):
        self.storage: Dict[str, PlayerClient] = {}

    def add(self, client: PlayerClient):
        """Register a client, replacing any entry with the same ID"""
        self.storage[client.id] = client

    def remove(self, client_id: str, client: Optional[PlayerClient] = None) -> bool:
        """Drop a client by ID; no-op if it is not registered.

        When `client` is given the entry is only dropped if it is still that
        exact object, so a late close of a replaced socket leaves the new
        registration alone.
        """
        current = self.storage.get(client_id)
        if current is None:
            return False
        if client is not None and current is not client:
            return False
        del self.storage[client_id]
        return True

    def find(self, client_id: str) -> Optional[PlayerClient]:
        return self.storage.get(client_id)

    def active(self) -> List[PlayerClient]:
        """Registered clients whose socket is still open, in registration order"""
        return [client for client in self.storage.values() if not client.is_closed]

    def catchers(self) -> List[PlayerClient]:
        return [client for client in self.storage.values() if client.catcher]

    def __len__(self):
        return len(self.storage)

    def __iter__(self) -> Iterator[PlayerClient]:
        return iter(list(self.storage.values()))

    async def close(self):
        """Close every registered socket and wait until all of them are closed"""
        clients = list(self.storage.values())
        self.storage.clear()
        if not clients:
            return
        results = await asyncio.gather(
            *(client.close() for client in clients), return_exceptions=True
        )
        for client, result in zip(clients, results):
            if isinstance(result, Exception):
                print(f"[Registry] error closing {client.id}: {result}")
        print(f"[Registry] closed {len(clients)} connection(s)")

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()
