# segbird/urls.py
#
# Path-segment joining for outbound endpoints and inbound routes.

import re

from segbird.errors import InvalidEventError

# Collapses runs of slashes, except the one following a "scheme:".
_DUPLICATE_SLASHES = re.compile(r"(?<!:)/{2,}")


def url_join(*parts: str) -> str:
    """Join URL parts with exactly one slash between non-empty segments.

    The first part keeps its leading slash or scheme; every other part is
    stripped of surrounding slashes.

        >>> url_join("http://orders:3000/", "/segbird", "created")
        'http://orders:3000/segbird/created'
    """
    parts = tuple(p for p in parts if p)
    if not parts:
        return ""

    segments = []
    for index, part in enumerate(parts):
        part = part.rstrip("/") if index == 0 else part.strip("/")
        if part:
            segments.append(part)

    joined = "/".join(segments)
    if parts[0].startswith("/") and not joined.startswith("/"):
        joined = "/" + joined
    return _DUPLICATE_SLASHES.sub("/", joined)


def route_path(prefix: str, event: str) -> str:
    path = url_join(prefix, event)
    return path if path.startswith("/") else "/" + path


def check_event(event: str) -> str:
    if not isinstance(event, str) or not event:
        raise InvalidEventError("Event name must be a non-empty string.")
    if "\\" in event:
        raise InvalidEventError(f"Invalid event {event!r}: backslashes are not allowed.")
    if "?" in event or "#" in event:
        raise InvalidEventError(f"Invalid event {event!r}: query and fragment characters are not allowed.")
    if any(segment in (".", "..") for segment in event.split("/")):
        raise InvalidEventError(f"Invalid event {event!r}: relative path segments are not allowed.")
    return event
