"""Tests for JSON decoders and the incremental frame splitter."""

import pytest

from crudstore import ProtocolError
from crudstore.json_codec import (
    FrameDecoder,
    decode_bytes,
    dumps,
    encode_bytes,
    loads,
    to_bool,
    to_list,
    to_option,
    to_pair,
    to_string,
    to_unit,
)


def test_to_bool_rejects_strings_and_numbers():
    assert to_bool(True) is True
    assert to_bool(False) is False
    for value in ("42", 1, 0, None):
        with pytest.raises(ProtocolError):
            to_bool(value)


def test_to_unit_accepts_empty_values():
    assert to_unit(None) is None
    assert to_unit({}) is None
    assert to_unit([]) is None
    with pytest.raises(ProtocolError):
        to_unit("done")


def test_composite_decoders():
    decode = to_list(to_pair(to_string, to_bool))
    assert decode([["a", True], ["b", False]]) == [("a", True), ("b", False)]
    with pytest.raises(ProtocolError):
        decode([["a", True, 1]])
    with pytest.raises(ProtocolError):
        decode({"a": True})
    assert to_option(to_string)(None) is None
    assert to_option(to_string)("x") == "x"


def test_bytes_encoding():
    assert encode_bytes(b"hello") == "hello"
    assert encode_bytes(b"\xff\x00") == {"hex": "ff00"}
    assert decode_bytes("hello") == b"hello"
    assert decode_bytes({"hex": "ff00"}) == b"\xff\x00"
    with pytest.raises(ProtocolError):
        decode_bytes({"hex": "zz"})
    with pytest.raises(ProtocolError):
        decode_bytes(12)


def test_loads_reports_malformed_json():
    assert loads('{"result": 1}') == {"result": 1}
    with pytest.raises(ProtocolError, match="malformed JSON"):
        loads("{not json")
    assert dumps({"a": [1, "é"]}) == '{"a":[1,"é"]}'


def test_frames_split_across_chunks():
    frames = FrameDecoder()
    assert frames.feed('{"result": [1,') == []
    assert frames.feed(' 2]}{"res') == [{"result": [1, 2]}]
    assert frames.feed('ult": 3}\n  {"error": "x"}') == [{"result": 3}, {"error": "x"}]
    frames.close()


def test_whitespace_only_tail_is_accepted():
    frames = FrameDecoder()
    assert frames.feed('{"result": 1}\n\n') == [{"result": 1}]
    assert frames.feed("   ") == []
    frames.close()


def test_truncated_frame_fails_on_close():
    frames = FrameDecoder()
    frames.feed('{"result": ')
    with pytest.raises(ProtocolError, match="malformed stream frame"):
        frames.close()


def test_oversized_pending_frame_is_rejected():
    frames = FrameDecoder(max_frame_bytes=16)
    with pytest.raises(ProtocolError, match="exceeds 16 bytes"):
        frames.feed('{"result": "' + "x" * 32)


def test_garbage_after_a_frame_is_reported_on_the_next_call():
    frames = FrameDecoder()
    assert frames.feed('{"result": 1}oops') == [{"result": 1}]
    with pytest.raises(ProtocolError, match="unexpected 'oops'"):
        frames.check()
    with pytest.raises(ProtocolError, match="unexpected"):
        frames.feed('{"result": 2}')


@pytest.mark.parametrize("chunk", ["oops", "\x1c{}", "\u00a0{}", "[1]", "]"])
def test_text_that_cannot_start_a_frame_fails_at_once(chunk):
    with pytest.raises(ProtocolError, match="malformed stream frame"):
        FrameDecoder().feed(chunk)


@pytest.mark.parametrize("chunk", ['{"result": 1]', '{"result": oops}', '{"result": [1,}'])
def test_invalid_frame_fails_when_its_brackets_close(chunk):
    with pytest.raises(ProtocolError, match="malformed stream frame"):
        FrameDecoder().feed(chunk)


def test_brackets_and_quotes_inside_strings_do_not_end_a_frame():
    frames = FrameDecoder()
    assert frames.feed('{"result": "}]\\"{') == []
    assert frames.feed('\\\\"}') == [{"result": '}]"{\\'}]
    frames.close()


def test_large_frame_fed_in_small_chunks():
    text = '{"result": "' + "é" * 5000 + '"}'
    frames = FrameDecoder(max_frame_bytes=len(text.encode("utf-8")))
    decoded = []
    for i in range(0, len(text), 3):
        decoded.extend(frames.feed(text[i : i + 3]))

    assert decoded == [{"result": "é" * 5000}]
    frames.close()
