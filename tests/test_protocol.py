"""Tests for the MiniGame wire protocol."""

import json

from aviator_feed import protocol
from aviator_feed.protocol import Command


def result_frame(**payload) -> str:
    return json.dumps([5, {"cmd": 100007, **payload}])


class TestOutbound:
    """Frames sent to the feed."""

    def test_auth_message(self):
        """Auth frame carries agent id and token without reconnect."""
        message = protocol.auth_message("1", "token-abc")
        assert message == [
            1,
            "MiniGame",
            "",
            "",
            {"agentId": "1", "accessToken": "token-abc", "reconnect": False},
        ]

    def test_subscribe_message(self):
        """Subscribe frame targets the aviator plugin with cmd 100000."""
        assert protocol.subscribe_message() == [
            "6",
            "MiniGame",
            "aviatorPlugin",
            {"cmd": 100000, "f": True},
        ]

    def test_request_messages(self):
        """Plain requests carry only the command code."""
        assert protocol.request_message(Command.GAME_DATA) == [
            "6",
            "MiniGame",
            "aviatorPlugin",
            {"cmd": 100016},
        ]
        assert protocol.request_message(Command.RESULT)[3] == {"cmd": 100007}

    def test_encode_is_json_array(self):
        """Encoded frames decode back to the same array."""
        encoded = protocol.encode(protocol.subscribe_message())
        assert json.loads(encoded) == ["6", "MiniGame", "aviatorPlugin", {"cmd": 100000, "f": True}]


class TestDecodeEnvelope:
    """Inbound frame shape checks."""

    def test_result_envelope(self):
        """A push frame decodes into kind, command and payload."""
        envelope = protocol.decode_envelope(result_frame(sid=123, odd=2.5))
        assert envelope.kind == 5
        assert envelope.command == Command.RESULT
        assert envelope.payload["sid"] == 123

    def test_bytes_frame(self):
        """Binary frames are accepted."""
        envelope = protocol.decode_envelope(result_frame(sid=1, odd=1.1).encode())
        assert envelope is not None

    def test_invalid_json(self):
        """Unparseable text is discarded."""
        assert protocol.decode_envelope("not json{") is None

    def test_not_an_array(self):
        """Objects at the top level are discarded."""
        assert protocol.decode_envelope('{"cmd": 100007}') is None

    def test_short_array(self):
        """Arrays without a payload are discarded."""
        assert protocol.decode_envelope("[5]") is None

    def test_payload_not_object(self):
        """A non-object payload is discarded."""
        assert protocol.decode_envelope('[5, "hello"]') is None

    def test_string_kind_rejected(self):
        """The frame kind must be a number."""
        assert protocol.decode_envelope('["5", {"cmd": 100007}]') is None

    def test_missing_command(self):
        """Payloads without cmd decode with no command."""
        envelope = protocol.decode_envelope('[5, {"foo": 1}]')
        assert envelope is not None
        assert envelope.command is None


class TestParseResult:
    """Result event extraction."""

    def test_valid_result(self):
        """sid and odd become an Outcome; extra fields are ignored."""
        envelope = protocol.decode_envelope(result_frame(sid=555, odd=3.21, extra="x"))
        outcome = protocol.parse_result(envelope)
        assert outcome.session_id == "555"
        assert outcome.multiplier == 3.21

    def test_missing_sid(self):
        """A result without sid is ignored."""
        envelope = protocol.decode_envelope(result_frame(odd=3.21))
        assert protocol.parse_result(envelope) is None

    def test_zero_odd(self):
        """A zero odd is ignored."""
        envelope = protocol.decode_envelope(result_frame(sid=1, odd=0))
        assert protocol.parse_result(envelope) is None

    def test_non_numeric_odd(self):
        """A non-numeric odd is ignored."""
        envelope = protocol.decode_envelope(result_frame(sid=1, odd="abc"))
        assert protocol.parse_result(envelope) is None

    def test_negative_odd(self):
        """A negative odd is ignored."""
        envelope = protocol.decode_envelope(result_frame(sid=1, odd=-2))
        assert protocol.parse_result(envelope) is None

    def test_overflowing_odd(self):
        """A numeric string that overflows to infinity is ignored."""
        envelope = protocol.decode_envelope(result_frame(sid=1, odd="1e999"))
        assert protocol.parse_result(envelope) is None

    def test_infinity_token_odd(self):
        """Bare Infinity and NaN tokens are ignored."""
        for token in ("Infinity", "NaN"):
            raw = '[5, {"cmd": 100007, "sid": 1, "odd": %s}]' % token
            envelope = protocol.decode_envelope(raw)
            assert envelope is not None
            assert protocol.parse_result(envelope) is None

    def test_numeric_string_odd(self):
        """A numeric string odd is converted to float."""
        envelope = protocol.decode_envelope(result_frame(sid="77", odd="1.85"))
        outcome = protocol.parse_result(envelope)
        assert outcome.multiplier == 1.85

    def test_other_command(self):
        """Only cmd 100007 carries results."""
        envelope = protocol.decode_envelope('[5, {"cmd": 100016, "sid": 1, "odd": 2}]')
        assert protocol.parse_result(envelope) is None

    def test_other_frame_kind(self):
        """Only push frames (kind 5) carry results."""
        envelope = protocol.decode_envelope('[7, {"cmd": 100007, "sid": 1, "odd": 2}]')
        assert protocol.parse_result(envelope) is None
