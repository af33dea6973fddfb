"""Driver endpoints.

Endpoints:
  - POST /api/v1/driver/position (bearer auth, empty response)
"""

from __future__ import annotations

from pyqapac._constants import DRIVER_POSITION_ENDPOINT
from pyqapac._transport import Transport
from pyqapac.models.position import DriverPositionSample


async def report_position(transport: Transport, access_token: str, sample: DriverPositionSample) -> None:
    """Push one position sample.

    Raises
    ------
    QapacAuthError
        On 401/403; the caller must invalidate the session.
    """
    await transport.request_json(
        "POST",
        DRIVER_POSITION_ENDPOINT,
        json_body=sample.to_payload(),
        bearer_token=access_token,
    )
