"""WKT ``LINESTRING`` decoding.

The backend ships route shapes as PostGIS WKT, e.g.
``LINESTRING(-78.5 -7.16, -78.51 -7.17)``. WKT orders each vertex as
``lon lat``; everything else in pyqapac uses ``(lat, lon)``, so the
decoder swaps the pair.

Decoding is lenient: a malformed vertex is dropped on its own and the
rest of the line is kept, and a string without a parenthesised body
decodes to an empty line. A partially drawn route is preferred over
none. :func:`decode_linestring_strict` is available for diagnostics.
"""

from __future__ import annotations

import logging
import math

from pyqapac.exceptions import MalformedGeometryError

_logger = logging.getLogger(__name__)

LatLon = tuple[float, float]


def _body(text: str | None) -> str | None:
    """Return the text between the outer parentheses, or ``None``."""
    if not text:
        return None
    start = text.find("(")
    end = text.rfind(")")
    if start < 0 or end <= start:
        return None
    body = text[start + 1 : end].strip()
    return body or None


def _parse_vertex(raw: str) -> LatLon:
    parts = raw.split()
    # Z/M ordinates are allowed but ignored.
    if len(parts) < 2:
        raise ValueError(f"expected 'lon lat', got {raw!r}")
    lon = float(parts[0])
    lat = float(parts[1])
    if not (math.isfinite(lat) and math.isfinite(lon)):
        raise ValueError(f"non-finite coordinate in {raw!r}")
    return lat, lon


def decode_linestring(text: str | None) -> list[LatLon]:
    """Decode a WKT linestring into ``(lat, lon)`` pairs, skipping bad vertices."""
    body = _body(text)
    if body is None:
        return []

    coords: list[LatLon] = []
    skipped = 0
    for raw in body.split(","):
        try:
            coords.append(_parse_vertex(raw))
        except ValueError:
            skipped += 1
    if skipped:
        _logger.debug("Skipped %d malformed WKT vertices (kept %d)", skipped, len(coords))
    return coords


def decode_linestring_strict(text: str | None) -> list[LatLon]:
    """Decode a WKT linestring, raising on the first malformed vertex.

    Raises
    ------
    MalformedGeometryError
        If the parentheses are missing/empty or any vertex is unparseable.
    """
    body = _body(text)
    if body is None:
        raise MalformedGeometryError(f"no coordinate list in {str(text)[:64]!r}")
    coords: list[LatLon] = []
    for index, raw in enumerate(body.split(",")):
        try:
            coords.append(_parse_vertex(raw))
        except ValueError as exc:
            raise MalformedGeometryError(f"vertex {index}: {exc}") from exc
    return coords
