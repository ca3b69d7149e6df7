import pytest

from resumelog.codec import Codec, to_int
from resumelog.config import ConfigurationError, DataKind


def test_integer_encode_truncates():
    codec = Codec(DataKind.INTEGER)
    assert codec.encode(12.9) == b"12"
    assert codec.encode(-3.7) == b"-3"
    assert codec.encode("7abc") == b"7"
    assert codec.encode("abc") == b"0"


def test_integer_decode_never_fails():
    codec = Codec("integer")
    assert codec.decode(b"42\n") == 42
    assert codec.decode(b"not a number") == 0
    assert codec.decode(b"") == 0
    assert codec.decode(None) == 0


@pytest.mark.parametrize(
    "kind, record",
    [
        ("integer", 12.5),
        ("structured", {"id": 3, "tags": ["a", "b"], "meta": {"ok": True, "note": "line\nbreak"}}),
        ("structured", [1, 2, {"nested": None}]),
        ("flat", ["a", "b", "c"]),
        ("flat", [1, None, "x"]),
    ],
)
def test_decode_inverts_encode(kind, record):
    codec = Codec(kind)
    encoded = codec.encode(record)
    assert b"\n" not in encoded
    assert codec.decode(encoded) == codec.normalize(record)


def test_flat_encode_strips_delimiter():
    codec = Codec("flat")
    assert codec.encode(["a\nb", "c"]) == b"ab,c"
    assert codec.decode(b"a,b,c\n") == ["a", "b", "c"]


def test_malformed_input_degrades_to_empty():
    structured = Codec("structured")
    assert structured.decode(b"{broken") == {}
    assert structured.decode(b"null") == {}
    assert structured.decode(b"\n") == {}
    assert Codec("flat").decode(b"") == []


def test_is_empty_per_kind():
    assert Codec("integer").is_empty(0)
    assert Codec("integer").is_empty(None)
    assert not Codec("integer").is_empty(5)
    assert Codec("structured").is_empty({})
    assert not Codec("structured").is_empty({"id": 0})
    assert Codec("flat").is_empty([])
    assert not Codec("flat").is_empty(["0"])


def test_unsupported_kind_rejected():
    with pytest.raises(ConfigurationError):
        Codec("xml")


def test_to_int():
    assert to_int(True) == 1
    assert to_int(float("nan")) == 0
    assert to_int(b"-5 apples") == -5
    assert to_int({"id": 1}) == 0
