# tagserver/player.py
import random

from websockets.protocol import State

from .geometry import Point
from .protocol import KEYS


def random_rgba_color() -> str:
    r, g, b = (random.randrange(255) for _ in range(3))
    return f"rgba({r}, {g}, {b}, 1)"


class PlayerClient:
    """A connected player: the websocket it talks on plus its game state."""

    WIDTH = 640
    HEIGHT = 480
    SPEED = 4

    def __init__(self, client_id: str, websocket, color: str = None,
                 catcher: bool = False, position: Point = None):
        self.id = client_id
        self.websocket = websocket
        self.position = position if position is not None else Point(0, 0)
        self.color = color or random_rgba_color()
        self.catcher = catcher
        self.speed = self.SPEED
        # { "up": bool, "down": bool, "left": bool, "right": bool }
        self.pressed = dict.fromkeys(KEYS, False)
        self.closed = False

    @property
    def is_closed(self) -> bool:
        if self.closed:
            return True
        return getattr(self.websocket, "state", None) is State.CLOSED

    async def close(self):
        self.closed = True
        await self.websocket.close()

    def update(self, message):
        """Apply an Input message to the pressed-key flags."""
        self.pressed[message.key] = message.is_pressed

    def update_status(self):
        """Move one step for every pressed direction, keeping inside the field.

        Not idempotent: each call moves again, so call it once per tick.
        """
        pos = self.position
        if self.pressed["up"]:
            pos.y = max(0, pos.y - self.speed)
        if self.pressed["down"]:
            pos.y = min(self.HEIGHT, pos.y + self.speed)
        if self.pressed["left"]:
            pos.x = max(0, pos.x - self.speed)
        if self.pressed["right"]:
            pos.x = min(self.WIDTH, pos.x + self.speed)

    def status(self) -> dict:
        """Public record sent to every client (key state stays private)."""
        return {
            "id": self.id,
            "position": self.position.to_dict(),
            "color": self.color,
            "catcher": self.catcher,
            "speed": self.speed,
        }

    def __repr__(self):
        return f"PlayerClient({self.id!r}, catcher={self.catcher}, position={self.position!r})"
