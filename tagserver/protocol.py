# tagserver/protocol.py
import json
import uuid

KEYS = ("up", "down", "left", "right")


class Connect:
    """`{"client": <uuid>, "data": {"connect": true}}`"""

    def __init__(self, client: str):
        self.client = client


class Input:
    """`{"client": <uuid>, "data": {"key": <direction>, "isPressed": <bool>}}`"""

    def __init__(self, client: str, key: str, is_pressed: bool):
        self.client = client
        self.key = key
        self.is_pressed = is_pressed


def decode(frame) -> dict:
    """Convert a text or binary JSON frame back to a Python object."""
    return json.loads(frame)


def _client_id(value):
    if not isinstance(value, str):
        return None
    try:
        uuid.UUID(value)
    except ValueError:
        return None
    return value


def decode_messages(frame) -> list:
    """Decode an inbound envelope into the messages it carries.

    The payload is tried against both the Connect and the Input shape, so a
    frame yields zero, one or (in the odd case of a payload matching both)
    two messages, Connect first. Anything malformed decodes to an empty list.
    """
    try:
        envelope = decode(frame)
    except (ValueError, TypeError):
        return []
    if not isinstance(envelope, dict):
        return []

    client = _client_id(envelope.get("client"))
    data = envelope.get("data")
    if client is None or not isinstance(data, dict):
        return []

    messages = []
    # Only a literal true registers; {"connect": false} is treated as malformed
    if data.get("connect") is True:
        messages.append(Connect(client))
    key = data.get("key")
    pressed = data.get("isPressed")
    if key in KEYS and isinstance(pressed, bool):
        messages.append(Input(client, key, pressed))
    return messages


def encode(msg, binary: bool = True):
    """Convert a snapshot to a JSON frame (bytes for binary frames, str for text)."""
    text = json.dumps(msg, separators=(",", ":"))
    return text.encode("utf-8") if binary else text


def encode_snapshot(statuses, binary: bool = True):
    return encode(list(statuses), binary=binary)
