# tagclient/renderer.py
import re

import pygame

WIDTH, HEIGHT = 640, 480
PLAYER_RADIUS = 9
CATCHER_RADIUS = 6
LOCAL_RADIUS = 3

_RGBA = re.compile(r"rgba\(\s*(\d+)\s*,\s*(\d+)\s*,\s*(\d+)\s*,\s*[\d.]+\s*\)")


def parse_color(text):
    """Turn an "rgba(r, g, b, a)" string into a pygame RGB tuple."""
    match = _RGBA.match(text or "")
    if not match:
        return (255, 255, 255)
    return tuple(min(255, int(c)) for c in match.groups())


def init():
    screen = pygame.display.set_mode((WIDTH, HEIGHT))
    pygame.display.set_caption("Tag Arena")
    return screen


def draw(screen, players, local_id):
    """Draw all players; the catcher gets a black core, the local player a white dot."""
    screen.fill((0, 0, 0))
    for p in players:
        pos = (int(p["position"]["x"]), int(p["position"]["y"]))
        pygame.draw.circle(screen, parse_color(p.get("color")), pos, PLAYER_RADIUS)
        if p.get("catcher"):
            pygame.draw.circle(screen, (0, 0, 0), pos, CATCHER_RADIUS)
        if str(p.get("id", "")).lower() == local_id:
            pygame.draw.circle(screen, (255, 255, 255), pos, LOCAL_RADIUS)
    pygame.display.flip()
