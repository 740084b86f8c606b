from __future__ import annotations

from typing import List, Tuple


def _decode_value(s: str, idx: int) -> tuple[int, int]:
    result = 0
    shift = 0
    while True:
        if idx >= len(s):
            raise ValueError("truncated polyline")
        b = ord(s[idx]) - 63
        if b < 0:
            raise ValueError(f"invalid polyline character at {idx}")
        idx += 1
        result |= (b & 0x1F) << shift
        shift += 5
        if b < 0x20:
            break
    d = ~(result >> 1) if (result & 1) else (result >> 1)
    return d, idx


def decode_polyline(poly: str, precision: int = 6) -> List[Tuple[float, float]]:
    """
    Decode a Google-encoded polyline into [(lat, lng), ...].

    Routing engines emit Polyline6 (1e6) by default; pass ``precision=5``
    for classic Google polylines. Raises ValueError on malformed input.
    """
    factor = float(10 ** precision)
    idx = 0
    lat = 0
    lng = 0
    coords: List[Tuple[float, float]] = []
    n = len(poly)
    while idx < n:
        dlat, idx = _decode_value(poly, idx)
        dlng, idx = _decode_value(poly, idx)
        lat += dlat
        lng += dlng
        coords.append((lat / factor, lng / factor))
    return coords


def encode_polyline(coords: List[Tuple[float, float]], precision: int = 6) -> str:
    factor = 10 ** precision
    out: List[str] = []
    last_lat = 0
    last_lng = 0
    for lat, lng in coords:
        ilat = int(round(lat * factor))
        ilng = int(round(lng * factor))
        for delta in (ilat - last_lat, ilng - last_lng):
            v = ~(delta << 1) if delta < 0 else (delta << 1)
            while v >= 0x20:
                out.append(chr((0x20 | (v & 0x1F)) + 63))
                v >>= 5
            out.append(chr(v + 63))
        last_lat = ilat
        last_lng = ilng
    return "".join(out)
