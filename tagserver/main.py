# tagserver/main.py - Tag arena websocket server
import argparse
import asyncio
import functools
import os
import time

import websockets

from .game import GameSystem


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").strip().lower() in ("1", "true", "yes", "on")


async def handle_client(game: GameSystem, websocket, path=None):
    """Feed every frame from one socket into the game until it closes.

    Compatible with websockets versions that pass either (websocket) or (websocket, path).
    """
    print("[SVR] client connected")
    try:
        async for message in websocket:
            try:
                game.handle_message(websocket, message)
            except Exception as e:
                print(f"[SVR] error handling message: {e}")
    except websockets.ConnectionClosedOK:
        print("[SVR] client disconnected normally")
    except websockets.ConnectionClosedError as e:
        print(f"[SVR] client disconnected with error: {e}")
    finally:
        # The close notification: the only way a player leaves the registry
        # besides a failed send
        game.disconnect(websocket)
        print("[SVR] client connection cleaned up")


async def status_reporter(game: GameSystem, interval: float = 30.0):
    """Periodically report server status"""
    try:
        while True:
            await asyncio.sleep(interval)
            stats = game.stats()
            if stats["total_players"] > 0:
                print("=== SERVER STATUS ===")
                print(f"Players: {stats['active_players']} active / {stats['total_players']} registered")
                print(f"Catchers: {stats['catchers']}")
                print(f"Game Tick: {stats['game_tick']}")
                print(f"Uptime: {int(time.time() - stats['created_at'])}s")
                print(f"Tag Cooldown: {'on' if stats['cooldown_active'] else 'off'}")
                print("====================")
    except asyncio.CancelledError:
        pass


async def main(host: str = "0.0.0.0", port: int = 8765, tick_ms: float = 20,
               cooldown: float = 2.0, text_frames: bool = False):
    """Main server function"""
    print("🏃 Tag Arena Multiplayer Server")
    print("===============================")
    print(f"- Tick: {tick_ms:g} ms")
    print(f"- Tag cooldown: {cooldown:g} s")
    print(f"- Frames: {'text' if text_frames else 'binary'}")

    game = GameSystem(tick_interval=tick_ms / 1000.0, cooldown=cooldown,
                      binary_frames=not text_frames)
    await game.start()
    status_task = asyncio.create_task(status_reporter(game))

    try:
        async with websockets.serve(functools.partial(handle_client, game), host, port):
            print(f"\n✅ Server running on ws://localhost:{port}")
            print("Press Ctrl+C to stop the server\n")
            await asyncio.Event().wait()
    finally:
        status_task.cancel()
        await game.stop()
        print("✅ Server stopped successfully")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Tag Arena Server")
    parser.add_argument("--host", default=os.getenv("TAG_SERVER_HOST", "0.0.0.0"),
                        help="Interface to bind the game server on")
    parser.add_argument("--port", type=int, default=int(os.getenv("TAG_SERVER_PORT", "8765")),
                        help="Port to bind the game server on")
    parser.add_argument("--tick-ms", type=float, default=float(os.getenv("TAG_TICK_MS", "20")),
                        help="Simulation tick interval in milliseconds")
    parser.add_argument("--cooldown", type=float, default=float(os.getenv("TAG_COOLDOWN_SECS", "2.0")),
                        help="Seconds during which no new tag may happen after a tag")
    parser.add_argument("--text-frames", action="store_true", default=_env_flag("TAG_TEXT_FRAMES"),
                        help="Send snapshots as text frames instead of binary")
    return parser


if __name__ == "__main__":
    try:
        args = build_parser().parse_args()
        asyncio.run(main(host=args.host, port=args.port, tick_ms=args.tick_ms,
                         cooldown=args.cooldown, text_frames=args.text_frames))
    except KeyboardInterrupt:
        print("\nServer stopped")
