"""Per-frame decoding shared by the market and user clients."""

import json
import logging
from decimal import Decimal
from typing import Any, Optional, Union

from pydantic import TypeAdapter, ValidationError

from ..errors import DecodeError, UnsupportedFrameError

logger = logging.getLogger(__name__)


def decode_text(text: str, adapter: TypeAdapter) -> Optional[Any]:
    """
    Decode one text frame into an event.

    The server sends either a single event object or a batch array. Only the
    first element of a batch is decoded; an empty batch decodes to ``None``.

    Raises:
        DecodeError: If the payload is not JSON or matches no event shape
    """
    try:
        # Numbers stay Decimal so prices keep every digit
        data = json.loads(text, parse_float=Decimal)
    except json.JSONDecodeError as e:
        raise DecodeError(f"Invalid JSON: {e}", payload=text, cause=e) from e
    except RecursionError as e:
        raise DecodeError("JSON nested too deeply", payload=text, cause=e) from e

    if isinstance(data, list):
        if not data:
            return None
        # Batches are single-element in practice; extras are ignored
        data = data[0]

    try:
        return adapter.validate_python(data)
    except ValidationError as e:
        raise DecodeError(
            f"Unrecognized event: {e.error_count()} validation error(s)",
            payload=text,
            cause=e,
        ) from e


def decode_frame(message: Union[str, bytes], adapter: TypeAdapter) -> Optional[Any]:
    """
    Decode one data frame, returning an event, a ``DecodeError`` or ``None``.

    Control frames (ping, pong, close) are handled by the protocol layer and
    never reach this function.
    """
    if isinstance(message, bytes):
        return UnsupportedFrameError(
            f"Unexpected binary message ({len(message)} bytes)",
            payload=message[:DecodeError.MAX_PAYLOAD_PREVIEW].hex(),
        )

    try:
        return decode_text(message, adapter)
    except DecodeError as e:
        logger.warning(f"Failed to decode message: {e}")
        logger.debug(f"Raw message: {message[:200]}...")
        return e
