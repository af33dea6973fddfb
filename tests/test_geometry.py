from __future__ import annotations

import pytest

from pyqapac.exceptions import MalformedGeometryError
from pyqapac.geometry import decode_linestring, decode_linestring_strict


def test_swaps_wkt_lon_lat_to_lat_lon() -> None:
    coords = decode_linestring("LINESTRING(-78.5 -7.16, -78.51 -7.17)")
    assert coords == [(-7.16, -78.5), (-7.17, -78.51)]


def test_malformed_pairs_are_dropped_individually() -> None:
    coords = decode_linestring("LINESTRING(-78.5 -7.16, garbage, -78.51, 1 2, x y)")
    assert coords == [(-7.16, -78.5), (2.0, 1.0)]


@pytest.mark.parametrize(
    "text",
    [
        None,
        "",
        "LINESTRING",
        "LINESTRING()",
        "LINESTRING(   )",
        "LINESTRING -78.5 -7.16",
        "LINESTRING)-78.5 -7.16(",
    ],
)
def test_missing_or_empty_parentheses_yield_empty_line(text: str | None) -> None:
    assert decode_linestring(text) == []


def test_tolerates_whitespace_case_and_extra_ordinates() -> None:
    coords = decode_linestring("  linestring z ( -78.5  -7.16 10 ,\n-78.51 -7.17 12 )  ")
    assert coords == [(-7.16, -78.5), (-7.17, -78.51)]


def test_non_finite_vertices_are_dropped() -> None:
    assert decode_linestring("LINESTRING(nan 1, 2 inf, 3 4)") == [(4.0, 3.0)]


def test_length_matches_number_of_well_formed_pairs() -> None:
    vertices = [f"{-78.5 - i / 100} {-7.16 - i / 100}" for i in range(25)]
    text = "LINESTRING(" + ", ".join(vertices) + ")"
    coords = decode_linestring(text)
    assert len(coords) == 25
    assert coords[3] == pytest.approx((-7.19, -78.53))


def test_strict_decoder_raises_on_bad_vertex() -> None:
    with pytest.raises(MalformedGeometryError, match="vertex 1"):
        decode_linestring_strict("LINESTRING(-78.5 -7.16, nope)")


def test_strict_decoder_raises_without_body() -> None:
    with pytest.raises(MalformedGeometryError):
        decode_linestring_strict("LINESTRING()")


def test_strict_decoder_matches_lenient_on_valid_input() -> None:
    text = "LINESTRING(-78.5 -7.16, -78.51 -7.17)"
    assert decode_linestring_strict(text) == decode_linestring(text)
