"""
frameattest.frame - Frame card markup and request body parsing.
"""

from __future__ import annotations

import html
import json
import logging
from typing import Any, Optional
from urllib.parse import parse_qsl

logger = logging.getLogger(__name__)

FRAME_HTML = """<!doctype html>
<html>
<head>
    <style>
        figure {{
            display: inline-block;
            margin: 0;
            max-width: 100%;
        }}
        img {{
            max-width: 100%;
            border: 4px inset black;
        }}
    </style>
    <meta property="og:image" content="{image}" />
    <meta property="fc:frame" content="vNext" />
    <meta property="fc:frame:image" content="{image}" />
    <meta property="fc:frame:post_url" content="{post_url}" />
    <meta property="fc:frame:button:1" content="{button}" />
    <title>{title}</title>
</head>
<body>
    <h1>{title}</h1>
    <figure>
        <img width="600" src="{image}" />
    </figure>
    <form action="/" method="post">
        <input type="submit" value="{button}" /> {count}
    </form>
</body>
</html>
"""


def image_url(public_url: str, count: int) -> str:
    return f"{public_url}/og-image?count={count}"


def render_frame(count: int, public_url: str = "", *,
                 title: str = "Attest Frame", button: str = "Frame me!") -> str:
    """Baseline frame card showing the visit count."""
    return FRAME_HTML.format(
        image=html.escape(image_url(public_url, count), quote=True),
        post_url=html.escape(f"{public_url}/", quote=True),
        button=html.escape(button, quote=True),
        title=html.escape(title),
        count=count,
    )


# ─── Request bodies ────────────────────────────────────────────────

JSON_TYPE = "application/json"
FORM_TYPE = "application/x-www-form-urlencoded"


def parse_body(content_type: Optional[str], body: bytes) -> dict:
    """Parse a POST body by its declared type. Unknown or broken bodies give ``{}``."""
    media_type = (content_type or "").split(";")[0].strip().lower()
    text = body.decode("utf-8", errors="replace")

    if media_type == JSON_TYPE:
        try:
            data = json.loads(text) if text else {}
        except ValueError:
            logger.warning("Ignoring malformed JSON body")
            return {}
        return data if isinstance(data, dict) else {}

    if media_type == FORM_TYPE:
        return dict(parse_qsl(text, keep_blank_values=True))

    return {}


def trusted_message_bytes(data: dict) -> Optional[str]:
    """Pull ``trustedData.messageBytes`` out of a parsed body.

    Form posts flatten the nesting, so ``trustedData.messageBytes``,
    ``trustedData[messageBytes]`` and a JSON-encoded ``trustedData`` value
    are all accepted.
    """
    trusted: Any = data.get("trustedData")
    if isinstance(trusted, str):
        try:
            trusted = json.loads(trusted)
        except ValueError:
            trusted = None
    if isinstance(trusted, dict):
        value = trusted.get("messageBytes")
        return value if isinstance(value, str) else None

    for key in ("trustedData.messageBytes", "trustedData[messageBytes]"):
        value = data.get(key)
        if isinstance(value, str):
            return value
    return None
