import json
import uuid

import pytest

from tagserver.protocol import Connect, Input, decode_messages, encode_snapshot

CLIENT = str(uuid.uuid4())


def frame(data, client=CLIENT):
    return json.dumps({"client": client, "data": data})


def test_decode_connect():
    [message] = decode_messages(frame({"connect": True}))
    assert isinstance(message, Connect)
    assert message.client == CLIENT


def test_decode_input_from_binary_frame():
    [message] = decode_messages(frame({"key": "left", "isPressed": False}).encode("utf-8"))
    assert isinstance(message, Input)
    assert (message.client, message.key, message.is_pressed) == (CLIENT, "left", False)


@pytest.mark.parametrize("client", [CLIENT.upper(), "{" + CLIENT + "}", CLIENT.replace("-", "")])
def test_client_id_is_echoed_verbatim(client):
    [message] = decode_messages(frame({"connect": True}, client=client))
    assert message.client == client


def test_payload_matching_both_shapes():
    messages = decode_messages(frame({"connect": True, "key": "up", "isPressed": True}))
    assert [type(m) for m in messages] == [Connect, Input]


@pytest.mark.parametrize("raw", [
    "not json",
    b"\xff\xfe\x00",
    "[1, 2, 3]",
    json.dumps({"data": {"connect": True}}),
    json.dumps({"client": CLIENT}),
    json.dumps({"client": CLIENT, "data": "connect"}),
    frame({"connect": True}, client="player-1"),
    frame({"connect": True}, client=42),
    frame({"connect": False}),
    frame({"connect": "yes"}),
    frame({"key": "jump", "isPressed": True}),
    frame({"key": "up", "isPressed": 1}),
    frame({"key": ["up"], "isPressed": True}),
    frame({}),
])
def test_malformed_frames_are_dropped(raw):
    assert decode_messages(raw) == []


def test_encode_snapshot():
    statuses = [{"id": CLIENT, "position": {"x": 1, "y": 2}, "color": "rgba(0, 0, 0, 1)",
                 "catcher": True, "speed": 4}]
    binary = encode_snapshot(statuses)
    text = encode_snapshot(statuses, binary=False)
    assert isinstance(binary, bytes)
    assert isinstance(text, str)
    assert json.loads(binary) == json.loads(text) == statuses
