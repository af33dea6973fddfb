"""Shared helpers for Qapac endpoint modules.

It is internal to pyqapac and may change at any time.
"""

from __future__ import annotations

import logging
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from pyqapac.exceptions import QapacServerError

_logger = logging.getLogger(__name__)

TModel = TypeVar("TModel", bound=BaseModel)


def parse_list(model: type[TModel], payload: Any, *, endpoint: str) -> list[TModel]:
    """Validate a JSON array item by item.

    A non-list payload is treated as an empty result. Items that fail
    validation are skipped so one bad row does not hide the others.
    """
    if not isinstance(payload, list):
        if payload is not None:
            _logger.debug("%s returned %s instead of a list", endpoint, type(payload).__name__)
        return []
    items: list[TModel] = []
    for index, raw in enumerate(payload):
        try:
            items.append(model.model_validate(raw))
        except ValidationError:
            _logger.debug("%s item %d skipped: %r", endpoint, index, raw, exc_info=True)
    return items


def parse_object(model: type[TModel], payload: Any, *, endpoint: str) -> TModel:
    """Validate a JSON object, mapping failures to :class:`QapacServerError`."""
    if not isinstance(payload, dict):
        raise QapacServerError(f"{endpoint} returned no JSON object", endpoint=endpoint)
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise QapacServerError(f"{endpoint} returned an invalid object: {exc}", endpoint=endpoint) from exc


def nearby_params(lat: float, lon: float, radius_m: float) -> dict[str, float]:
    return {"lat": lat, "lon": lon, "radius": radius_m}
