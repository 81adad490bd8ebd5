import asyncio
import json
import sys
import uuid

import pygame
import websockets

from . import renderer

KEY_MAP = {
    pygame.K_UP: "up",
    pygame.K_DOWN: "down",
    pygame.K_LEFT: "left",
    pygame.K_RIGHT: "right",
}


class TagClient:
    def __init__(self, server_url="ws://localhost:8765"):
        self.screen = None
        self.clock = pygame.time.Clock()
        self.server_url = server_url
        self.client_id = str(uuid.uuid4())
        self.last_players = []

    def init_display(self):
        """Initialize display"""
        try:
            pygame.init()
            if not pygame.display.get_init():
                raise pygame.error("No display available")
            self.screen = renderer.init()
            return True
        except pygame.error as e:
            print(f"Display initialization failed: {e}")
            return False

    def envelope(self, data):
        return json.dumps({"client": self.client_id, "data": data}).encode("utf-8")

    async def handle_input(self, websocket):
        """Forward arrow key presses and releases to the server"""
        while True:
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    return False
                if event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE:
                    return False
                if event.type in (pygame.KEYDOWN, pygame.KEYUP) and event.key in KEY_MAP:
                    pressed = event.type == pygame.KEYDOWN
                    try:
                        await websocket.send(self.envelope({"key": KEY_MAP[event.key], "isPressed": pressed}))
                    except websockets.ConnectionClosed:
                        return False
            await asyncio.sleep(1/60)

    async def game_loop(self, websocket):
        """Render every snapshot the server sends"""
        while True:
            try:
                message = await asyncio.wait_for(websocket.recv(), timeout=0.1)
                self.last_players = json.loads(message)
            except asyncio.TimeoutError:
                pass
            except websockets.ConnectionClosed:
                break
            except json.JSONDecodeError as e:
                print(f"Bad snapshot: {e}")
                continue

            renderer.draw(self.screen, self.last_players, self.client_id)
            self.clock.tick(60)

    async def run(self):
        """Main run method"""
        if not self.init_display():
            return

        print(f"Connecting to {self.server_url} as {self.client_id}...")
        try:
            async with websockets.connect(self.server_url) as websocket:
                await websocket.send(self.envelope({"connect": True}))
                print("Connected to server!")

                input_task = asyncio.create_task(self.handle_input(websocket))
                game_task = asyncio.create_task(self.game_loop(websocket))
                done, pending = await asyncio.wait(
                    [input_task, game_task],
                    return_when=asyncio.FIRST_COMPLETED
                )
                for task in pending:
                    task.cancel()
        except ConnectionRefusedError:
            print(f"Could not connect to server at {self.server_url}")
        except OSError as e:
            print(f"Network error: {e}")
        finally:
            pygame.quit()
            print("Game ended.")


async def main():
    print("🏃 Tag Arena Client")
    print("===================")
    client = TagClient(sys.argv[1] if len(sys.argv) > 1 else "ws://localhost:8765")
    print("Controls: Arrow keys to move, ESC to exit")
    await client.run()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print("\nGame interrupted.")
