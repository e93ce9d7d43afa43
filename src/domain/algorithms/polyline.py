"""Encoded polyline codec (Google's "Encoded Polyline Algorithm Format").

Each coordinate is scaled by 10**precision, delta-encoded against the previous
point, zig-zag mapped to a non-negative integer and written as little-endian
5-bit groups. Every group is offset by 63 to land in printable ASCII, and all
but the last group of a value carry the 0x20 continuation flag.
"""

from __future__ import annotations

import math
from itertools import accumulate
from typing import Iterable, Iterator, Sequence

from src.domain.models import Position

_OFFSET = 63
_GROUP = 32  # 5 bits per group
_CONTINUATION = 0x20


def _zigzag_decode(value: int) -> int:
    half, negative = divmod(value, 2)
    return -(half + 1) if negative else half


def _zigzag_encode(value: int) -> int:
    return -2 * value - 1 if value < 0 else 2 * value


def _iter_values(encoded: str) -> Iterator[int]:
    value = 0
    weight = 1
    for index, ch in enumerate(encoded):
        chunk = ord(ch) - _OFFSET
        if not (0 <= chunk < 2 * _GROUP):
            raise ValueError(f"Invalid polyline character {ch!r} at {index}")
        more, bits = divmod(chunk, _GROUP)
        value += bits * weight
        if more:
            weight *= _GROUP
            continue
        yield _zigzag_decode(value)
        value = 0
        weight = 1

    if weight != 1:
        raise ValueError("Truncated polyline")


def decode_polyline(encoded: str, *, precision: int = 5) -> tuple[Position, ...]:
    values = tuple(_iter_values(encoded))
    if len(values) % 2:
        raise ValueError("Polyline has an unpaired coordinate")

    factor = 10**precision
    lats = accumulate(values[0::2])
    lngs = accumulate(values[1::2])
    return tuple(
        Position(lat=lat / factor, lng=lng / factor) for lat, lng in zip(lats, lngs)
    )


def _encode_value(value: int) -> Iterable[str]:
    remaining = _zigzag_encode(value)
    while remaining >= _GROUP:
        remaining, bits = divmod(remaining, _GROUP)
        yield chr(bits + _CONTINUATION + _OFFSET)
    yield chr(remaining + _OFFSET)


def _scaled(value: float, factor: int) -> int:
    # Round half away from zero.
    return int(math.copysign(math.floor(abs(value) * factor + 0.5), value))


def encode_polyline(points: Sequence[Position], *, precision: int = 5) -> str:
    factor = 10**precision
    out: list[str] = []
    prev_lat = 0
    prev_lng = 0
    for p in points:
        lat = _scaled(p.lat, factor)
        lng = _scaled(p.lng, factor)
        out.extend(_encode_value(lat - prev_lat))
        out.extend(_encode_value(lng - prev_lng))
        prev_lat, prev_lng = lat, lng
    return "".join(out)
