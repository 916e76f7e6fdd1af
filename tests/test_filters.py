from __future__ import annotations

import zlib

import pytest

from pdfcorex import filters
from pdfcorex.exceptions import UnsupportedFilterError
from pdfcorex.objects import Array, Dict, Name, StreamDict


def test_flate_decode() -> None:
    payload = b"BT /F1 12 Tf (Hello) Tj ET"

    assert filters.decode(zlib.compress(payload), ["FlateDecode"]) == payload


def test_abbreviated_filter_names() -> None:
    assert filters.decode(b"48656C6C6F>", ["AHx"]) == b"Hello"


def test_pipeline_applies_stages_in_order() -> None:
    payload = b"stream payload " * 20
    encoded = filters.encode(payload, ["ASCIIHexDecode", "FlateDecode"])

    assert filters.decode(encoded, ["ASCIIHexDecode", "FlateDecode"]) == payload
    assert zlib.decompress(bytes.fromhex(encoded.rstrip(b">").decode("ascii"))) == payload


def test_run_length_decode() -> None:
    # Literal run of three bytes, then "z" repeated four times, then EOD.
    assert filters.decode(b"\x02abc\xfdz\x80", ["RunLengthDecode"]) == b"abczzzz"


@pytest.mark.parametrize("name", ["DCTDecode", "JPXDecode", "JBIG2Decode", "Crypt"])
def test_unsupported_decode_filters(name: str) -> None:
    with pytest.raises(UnsupportedFilterError):
        filters.decode(b"\x00", [name])


def test_unsupported_encode_filter() -> None:
    with pytest.raises(UnsupportedFilterError):
        filters.encode(b"data", ["LZWDecode"])


def test_encode_with_predictor_is_rejected() -> None:
    with pytest.raises(UnsupportedFilterError):
        filters.encode(b"data", [("FlateDecode", Dict(Predictor=12))])


def test_decode_stream_stores_content() -> None:
    stream = StreamDict(Filter=Name("FlateDecode"), raw=zlib.compress(b"q Q"))

    assert filters.decode_stream(stream)
    assert stream.is_decoded
    assert stream.content == b"q Q"


def test_decode_stream_leaves_images_raw() -> None:
    stream = StreamDict(Filter=Array([Name("DCTDecode")]), raw=b"\xff\xd8\xff")

    assert not filters.decode_stream(stream)
    assert not stream.is_decoded
    assert stream.raw == b"\xff\xd8\xff"


def test_encode_stream_updates_length() -> None:
    stream = StreamDict(Filter=Name("FlateDecode"), content=b"0 0 m 10 10 l S")

    filters.encode_stream(stream)

    assert stream["Length"] == len(stream.raw)
    assert zlib.decompress(stream.raw) == b"0 0 m 10 10 l S"
