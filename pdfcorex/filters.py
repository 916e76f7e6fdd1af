"""Named codec pipeline over stream payloads.

Codecs are provided by :mod:`pypdf.filters`.  The pipeline is applied left to right
when decoding and right to left when encoding.
"""

from __future__ import annotations

import binascii
import logging
from typing import Any, Callable, Iterable

from pypdf.errors import PdfReadError as PypdfReadError
from pypdf.filters import (
    ASCII85Decode,
    ASCIIHexDecode,
    CCITTFaxDecode,
    FlateDecode,
    LZWDecode,
    RunLengthDecode,
)

from .backends.convert import to_pypdf
from .exceptions import PdfReadError, UnsupportedFilterError
from .objects import Dict, FilterStage, StreamDict, filter_pipeline

__all__ = [
    "SUPPORTED_DECODE_FILTERS",
    "SUPPORTED_ENCODE_FILTERS",
    "decode",
    "encode",
    "decode_stream",
    "encode_stream",
]

LOGGER = logging.getLogger("pdfcorex.filters")

_ABBREVIATIONS = {
    "AHx": "ASCIIHexDecode",
    "A85": "ASCII85Decode",
    "LZW": "LZWDecode",
    "Fl": "FlateDecode",
    "RL": "RunLengthDecode",
    "CCF": "CCITTFaxDecode",
    "DCT": "DCTDecode",
}

# Image codecs whose payload is handed to consumers undecoded.
_PASSTHROUGH = {"DCTDecode", "JPXDecode", "JBIG2Decode"}


def _ccitt(data: bytes, parms: Any) -> bytes:
    height = 0
    if parms is not None:
        height = int(parms.get("/Rows", 0) or 0)
    return CCITTFaxDecode.decode(data, parms, height=height)


_DECODERS: dict[str, Callable[[bytes, Any], bytes]] = {
    "FlateDecode": lambda data, parms: FlateDecode.decode(data, parms),
    "LZWDecode": lambda data, parms: LZWDecode.decode(data, parms),
    "ASCII85Decode": lambda data, parms: ASCII85Decode.decode(data, parms),
    "ASCIIHexDecode": lambda data, parms: ASCIIHexDecode.decode(data, parms),
    "RunLengthDecode": lambda data, parms: RunLengthDecode.decode(data, parms),
    "CCITTFaxDecode": _ccitt,
}

_ENCODERS: dict[str, Callable[[bytes], bytes]] = {
    "FlateDecode": lambda data: FlateDecode.encode(data),
    "ASCIIHexDecode": lambda data: binascii.hexlify(data).upper() + b">",
}

SUPPORTED_DECODE_FILTERS = frozenset(_DECODERS)
SUPPORTED_ENCODE_FILTERS = frozenset(_ENCODERS)


def _canonical(name: str) -> str:
    return _ABBREVIATIONS.get(name, name)


def _stages(pipeline: Iterable[FilterStage | tuple[str, Dict | None] | str]) -> list[FilterStage]:
    stages = []
    for stage in pipeline:
        if isinstance(stage, FilterStage):
            stages.append(stage)
        elif isinstance(stage, tuple):
            stages.append(FilterStage(str(stage[0]), stage[1]))
        else:
            stages.append(FilterStage(str(stage)))
    return stages


def decode(payload: bytes, pipeline: Iterable[FilterStage | tuple[str, Dict | None] | str]) -> bytes:
    """Apply every decode stage of ``pipeline`` to ``payload``."""

    data = payload
    for stage in _stages(pipeline):
        name = _canonical(stage.name)
        decoder = _DECODERS.get(name)
        if decoder is None:
            raise UnsupportedFilterError(f"filter {name} is not supported")
        parms = to_pypdf(stage.parms) if stage.parms is not None else None
        try:
            data = decoder(data, parms)
        except PypdfReadError as exc:
            raise PdfReadError(f"{name}: {exc}") from exc
    return data


def encode(payload: bytes, pipeline: Iterable[FilterStage | tuple[str, Dict | None] | str]) -> bytes:
    """Encode ``payload`` so that decoding with ``pipeline`` yields it back."""

    data = payload
    for stage in reversed(_stages(pipeline)):
        name = _canonical(stage.name)
        encoder = _ENCODERS.get(name)
        if encoder is None:
            raise UnsupportedFilterError(f"filter {name} cannot be used for encoding")
        if stage.parms and stage.parms.get("Predictor", 1) != 1:
            raise UnsupportedFilterError(f"filter {name} with predictor cannot be used for encoding")
        data = encoder(data)
    return data


def decode_stream(stream: StreamDict, resolve: Callable[[Any], Any] | None = None) -> bool:
    """Decode ``stream`` in place.

    Returns ``False`` and leaves the payload raw when the pipeline contains an
    unsupported or image-only codec.
    """

    if stream.content is not None:
        return True
    pipeline = filter_pipeline(stream, resolve)
    if any(_canonical(stage.name) in _PASSTHROUGH for stage in pipeline):
        LOGGER.debug("leaving image stream encoded: %s", [stage.name for stage in pipeline])
        return False
    try:
        stream.content = decode(stream.raw or b"", pipeline)
    except UnsupportedFilterError as exc:
        LOGGER.debug("skipping stream: %s", exc)
        return False
    return True


def encode_stream(stream: StreamDict, resolve: Callable[[Any], Any] | None = None) -> None:
    """Re-encode ``stream.content`` into ``stream.raw`` and fix ``/Length``."""

    if stream.content is not None:
        stream.raw = encode(stream.content, filter_pipeline(stream, resolve))
    stream["Length"] = len(stream.raw or b"")
