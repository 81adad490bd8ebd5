# tagserver/game.py
import asyncio
import time

import websockets

from .player import PlayerClient
from .protocol import Connect, Input, decode_messages, encode_snapshot
from .registry import ClientRegistry


class GameSystem:
    """Owns the registry and the tag cooldown and drives the fixed-tick simulation.

    Everything here runs on one asyncio event loop. Message handling and
    `tick()` are plain synchronous code between awaits, so registry and player
    mutations never interleave; only outbound sends are scheduled as tasks.
    """

    TICK_INTERVAL = 0.02  # 50 ticks per second
    COOLDOWN = 2.0        # seconds without tags after any tag
    TAG_DISTANCE = 18

    def __init__(self, tick_interval: float = None, cooldown: float = None,
                 clock=time.monotonic, binary_frames: bool = True):
        self.clients = ClientRegistry()
        self.tick_interval = tick_interval or self.TICK_INTERVAL
        self.cooldown = self.COOLDOWN if cooldown is None else cooldown
        self.clock = clock
        self.binary_frames = binary_frames
        # Time of the last tag anywhere in the game, None when tags are allowed
        self.last_tag = None
        self.game_tick = 0
        self.running = False
        self.game_loop_task = None
        self.created_at = time.time()
        self._send_in_flight = {}  # websocket -> send task

    async def start(self):
        """Start the tick driver"""
        if self.running:
            return
        self.running = True
        self.game_loop_task = asyncio.create_task(self._game_loop())
        print("[Game] started")

    async def stop(self):
        """Stop the tick driver and close every connection"""
        self.running = False
        if self.game_loop_task:
            self.game_loop_task.cancel()
            try:
                await self.game_loop_task
            except asyncio.CancelledError:
                pass
            self.game_loop_task = None
        for task in list(self._send_in_flight.values()):
            task.cancel()
        self._send_in_flight.clear()
        await self.clients.close()
        print("[Game] stopped")

    async def __aenter__(self):
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.stop()

    def connect(self, client_id: str, websocket) -> PlayerClient:
        """Register a player for `client_id`, replacing any previous registration.

        The new player is the catcher when nobody else holds that role. A
        replaced registration does not count, so reconnecting the catcher
        keeps exactly one catcher in the game.
        """
        previous = self.clients.find(client_id)
        catcher = not any(c is not previous for c in self.clients.catchers())
        player = PlayerClient(client_id, websocket, catcher=catcher)
        self.clients.add(player)
        if previous is not None:
            print(f"[Game] player {client_id} re-registered")
        else:
            print(f"[Game] player {client_id} joined (catcher={catcher}), {len(self.clients)} online")
        return player

    def handle_message(self, websocket, frame) -> list:
        """Apply an inbound frame; malformed frames and unknown clients are ignored"""
        messages = decode_messages(frame)
        for message in messages:
            if isinstance(message, Connect):
                self.connect(message.client, websocket)
            elif isinstance(message, Input):
                player = self.clients.find(message.client)
                if player is not None:
                    player.update(message)
        return messages

    def disconnect(self, websocket) -> list:
        """Forget every player registered on a socket that has closed"""
        gone = [c for c in self.clients if c.websocket is websocket]
        for player in gone:
            self._drop(player)
            print(f"[Game] player {player.id} left, {len(self.clients)} online")
        self._send_in_flight.pop(websocket, None)
        return gone

    def _drop(self, player: PlayerClient):
        player.closed = True
        self.clients.remove(player.id, player)

    @property
    def cooldown_active(self) -> bool:
        return self.last_tag is not None

    def tick(self):
        """Advance the simulation by one step and broadcast the snapshot.

        Returns the encoded snapshot, or None when nobody is connected.
        """
        now = self.clock()
        if self.last_tag is not None and now - self.last_tag >= self.cooldown:
            self.last_tag = None

        players = self.clients.active()
        if not players:
            return None

        self.game_tick += 1
        for player in players:
            player.update_status()
        self._resolve_tag(players, now)

        payload = encode_snapshot((p.status() for p in players), binary=self.binary_frames)
        self._broadcast(players, payload)
        return payload

    def _resolve_tag(self, players, now):
        """Swap the catcher role for the first touching catcher/runner pair.

        Pairs are scanned in registry order and the cooldown starts at the
        first swap, so at most one swap happens per tick and the earliest
        registered pair wins ties.
        """
        if self.last_tag is not None:
            return None
        for player in players:
            for other in players:
                if other.id == player.id or player.catcher == other.catcher:
                    continue
                if player.position.distance(other.position) < self.TAG_DISTANCE:
                    self.last_tag = now
                    player.catcher = not player.catcher
                    other.catcher = not other.catcher
                    tagged = other if other.catcher else player
                    print(f"[Game] tick {self.game_tick}: {tagged.id} is now the catcher")
                    return player, other
        return None

    def _broadcast(self, players, payload):
        for player in players:
            ws = player.websocket
            # Coalesce: a client still receiving the previous frame skips this one
            inflight = self._send_in_flight.get(ws)
            if inflight and not inflight.done():
                continue
            self._send_in_flight[ws] = asyncio.create_task(self._send_one(player, payload))

    async def _send_one(self, player: PlayerClient, payload):
        ws = player.websocket
        try:
            await ws.send(payload)
        except websockets.ConnectionClosed:
            self._drop(player)
            print(f"[Game] player {player.id} dropped: connection closed")
        except Exception as e:
            self._drop(player)
            print(f"[Game] player {player.id} dropped: send failed: {e}")
        finally:
            if self._send_in_flight.get(ws) is asyncio.current_task():
                del self._send_in_flight[ws]

    async def _game_loop(self):
        """Fire `tick()` every interval, first fire one interval after start"""
        loop = asyncio.get_running_loop()
        deadline = loop.time()
        try:
            while self.running:
                deadline += self.tick_interval
                await asyncio.sleep(max(0.0, deadline - loop.time()))
                # Don't try to catch up after a long stall
                if loop.time() - deadline > self.tick_interval:
                    deadline = loop.time()
                try:
                    self.tick()
                except Exception as e:
                    print(f"[Game] tick {self.game_tick} failed: {e}")
        except asyncio.CancelledError:
            pass
        finally:
            self.running = False

    def stats(self) -> dict:
        """Snapshot of server-side counters for the status reporter"""
        active = self.clients.active()
        return {
            "total_players": len(self.clients),
            "active_players": len(active),
            "catchers": len(self.clients.catchers()),
            "game_tick": self.game_tick,
            "running": self.running,
            "cooldown_active": self.cooldown_active,
            "created_at": self.created_at,
        }
