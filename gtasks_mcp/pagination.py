"""Cursor handling between the MCP protocol and the Google Tasks API.

Both directions are currently the identity over the opaque string. They stay
separate functions so that the protocol cursor and the service page token can
diverge in format without touching the callers.
"""


def encode_cursor(page_token: str | None) -> str | None:
    """Turn a service ``nextPageToken`` into a protocol cursor."""
    if not page_token:
        return None
    return page_token


def decode_cursor(cursor: str | None) -> str | None:
    """Turn a protocol cursor back into a service ``pageToken``."""
    if not cursor:
        return None
    return cursor
