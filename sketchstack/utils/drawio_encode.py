"""draw.io share-link encoding for the editor and viewer URLs."""
from __future__ import annotations

import base64
import zlib
from urllib.parse import quote, unquote, urlencode


DRAWIO_EDITOR_URL = "https://app.diagrams.net/"
DRAWIO_VIEWER_URL = "https://viewer.diagrams.net/?highlight=0000ff&edit=_blank&layers=1&nav=1"

# Characters encodeURIComponent leaves alone besides alphanumerics.
_URI_COMPONENT_SAFE = "-_.!~*'()"


def deflate_raw(data: bytes) -> bytes:
    """Raw DEFLATE stream (no zlib header or checksum), default level."""
    compressor = zlib.compressobj(6, zlib.DEFLATED, -15, 8, zlib.Z_DEFAULT_STRATEGY)
    return compressor.compress(data) + compressor.flush()


def encode_drawio_payload(xml: str) -> str:
    compressed = deflate_raw(xml.encode("utf-8"))
    encoded = base64.b64encode(compressed).decode("ascii")
    return quote(encoded, safe=_URI_COMPONENT_SAFE)


def decode_drawio_payload(payload: str) -> str:
    """Inverse of ``encode_drawio_payload``; accepts the fragment with or without ``#R``."""
    token = payload.split("#R", 1)[-1]
    compressed = base64.b64decode(unquote(token))
    return zlib.decompress(compressed, -15).decode("utf-8")


def drawio_editor_url(xml: str, *, lightbox: bool = False, dark: str = "auto") -> str:
    params = {}
    if lightbox:
        params["lightbox"] = "1"
    if dark and dark != "auto":
        params["dark"] = dark
    query = f"?{urlencode(params)}" if params else ""
    return f"{DRAWIO_EDITOR_URL}{query}#R{encode_drawio_payload(xml)}"


def drawio_viewer_url(xml: str) -> str:
    return f"{DRAWIO_VIEWER_URL}#R{encode_drawio_payload(xml)}"
