from typing import List, Tuple

from .errors import DecodeError


def decode_polyline(polyline_str: str, precision: int = 5) -> List[Tuple[float, float]]:
    """
    Decode a polyline string (encoded by Google's polyline algorithm).
    Returns list of (lat, lng) tuples.

    Raises DecodeError on characters outside the encoding alphabet or when the
    string ends in the middle of a value.
    """
    inv = 1.0 / (10 ** precision)
    decoded = []
    previous = [0, 0]
    i = 0

    while i < len(polyline_str):
        ll = [0, 0]
        for j in [0, 1]:
            shift = 0
            result = 0
            while True:
                if i >= len(polyline_str):
                    raise DecodeError(f"polyline truncated at offset {i}")
                byte_val = ord(polyline_str[i]) - 63
                if not 0 <= byte_val < 64:
                    raise DecodeError(f"invalid character {polyline_str[i]!r} at offset {i}")
                i += 1
                result |= (byte_val & 0x1f) << shift
                shift += 5
                if not (byte_val & 0x20):
                    break

            if result & 1:
                ll[j] = previous[j] + ~(result >> 1)
            else:
                ll[j] = previous[j] + (result >> 1)
            previous[j] = ll[j]

        decoded.append((ll[0] * inv, ll[1] * inv))

    return decoded
