# tagserver/geometry.py
import math


class Point:
    """Integer position on the playfield."""

    def __init__(self, x: int = 0, y: int = 0):
        self.x = x
        self.y = y

    def distance(self, other: "Point") -> float:
        return math.sqrt((self.x - other.x) ** 2 + (self.y - other.y) ** 2)

    def to_dict(self):
        return {"x": self.x, "y": self.y}

    def __eq__(self, other):
        return isinstance(other, Point) and (self.x, self.y) == (other.x, other.y)

    def __repr__(self):
        return f"Point({self.x}, {self.y})"
