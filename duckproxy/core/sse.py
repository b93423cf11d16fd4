"""Parsing of backend event lines and encoding of outbound SSE events.

The backend streams one event per line:

    data: {"role":"assistant","message":"Hel","created":1720000000,"model":"gpt-4o-mini"}
    data: {"message":"lo","created":1720000000}
    data: [DONE]

Both the streaming bridge and the non-streaming aggregator use
:func:`parse_event` so they agree on what every frame means.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Optional, Union

logger = logging.getLogger("duckproxy")

DATA_PREFIX = "data:"
SENTINEL = "[DONE]"


@dataclass(frozen=True)
class BackendEvent:
    """A parsed backend frame carrying an optional role and text delta."""

    role: Optional[str] = None
    message: Optional[str] = None


class _Marker:
    """Singleton parse results that are not events."""

    def __init__(self, name: str) -> None:
        self._name = name

    def __repr__(self) -> str:
        return self._name


# Sentinel line: the backend has finished the answer.
DONE = _Marker("DONE")
# Unusable line: blank, unprefixed, or not a JSON object.
SKIP = _Marker("SKIP")

ParsedLine = Union[BackendEvent, _Marker]


def strip_prefix(line: str) -> Optional[str]:
    """Return the payload after the ``data:`` marker, or None without one."""
    line = line.strip()
    if not line.startswith(DATA_PREFIX):
        return None
    return line[len(DATA_PREFIX):].strip()


def parse_event(line: str) -> ParsedLine:
    """Parse one raw backend frame.

    Returns:
        ``DONE`` for the sentinel, ``SKIP`` for anything that cannot be
        used, otherwise a :class:`BackendEvent`.
    """
    payload = strip_prefix(line)
    if payload is None:
        return SKIP
    if payload == SENTINEL:
        return DONE

    try:
        data: Any = json.loads(payload)
    except json.JSONDecodeError:
        logger.debug("Dropping unparsable backend frame: %s", payload[:100])
        return SKIP
    if not isinstance(data, dict):
        logger.debug("Dropping non-object backend frame: %s", payload[:100])
        return SKIP

    role = data.get("role")
    message = data.get("message")
    return BackendEvent(
        role=role if isinstance(role, str) else None,
        message=message if isinstance(message, str) else None,
    )


def encode_sse(payload: Union[str, dict[str, Any]]) -> bytes:
    """Encode a payload as one ``data:`` server-sent event."""
    if isinstance(payload, str):
        data = payload
    else:
        data = json.dumps(payload, ensure_ascii=False)
    return f"data: {data}\n\n".encode("utf-8")
