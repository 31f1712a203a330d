"""Image extraction from provider responses.

Gateway providers return the generated image in one of three layouts inside
``choices[0].message``.  Each layout is parsed into its own shape so the
extraction step handles every case explicitly:

=================  ==========================================================
Shape              Layout
=================  ==========================================================
ImagesArrayShape   ``message.images[0].image_url.url``
ContentUrlShape    ``message.content[i]`` with ``type == "image_url"``
InlineDataShape    ``message.content[i]`` with ``type == "image"`` and
                   ``inline_data.data`` (base64)
NoImageShape       none of the above
=================  ==========================================================

Layouts are probed in that order and the first match wins.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Union

logger = logging.getLogger(__name__)

DEFAULT_INLINE_MIME_TYPE = "image/png"


@dataclass(frozen=True)
class ImagesArrayShape:
    url: str


@dataclass(frozen=True)
class ContentUrlShape:
    url: str


@dataclass(frozen=True)
class InlineDataShape:
    data: str
    mime_type: str = DEFAULT_INLINE_MIME_TYPE


@dataclass(frozen=True)
class NoImageShape:
    pass


ResponseShape = Union[ImagesArrayShape, ContentUrlShape, InlineDataShape, NoImageShape]


def _first_message(response: Any) -> dict:
    if not isinstance(response, dict):
        return {}
    choices = response.get("choices")
    if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
        return {}
    message = choices[0].get("message")
    return message if isinstance(message, dict) else {}


def _url_of(part: Any) -> str | None:
    if not isinstance(part, dict):
        return None
    image_url = part.get("image_url")
    if isinstance(image_url, dict) and image_url.get("url"):
        return image_url["url"]
    return None


def parse_response_shape(response: Any) -> ResponseShape:
    """Classify a raw provider response into one of the known shapes."""
    message = _first_message(response)

    images = message.get("images")
    if isinstance(images, list) and images:
        url = _url_of(images[0])
        if url:
            return ImagesArrayShape(url)

    content = message.get("content")
    if not isinstance(content, list):
        return NoImageShape()

    for part in content:
        if isinstance(part, dict) and part.get("type") == "image_url":
            url = _url_of(part)
            if url:
                return ContentUrlShape(url)

    for part in content:
        if not isinstance(part, dict) or part.get("type") != "image":
            continue
        inline = part.get("inline_data")
        if isinstance(inline, dict) and inline.get("data"):
            return InlineDataShape(
                data=inline["data"],
                mime_type=inline.get("mime_type") or DEFAULT_INLINE_MIME_TYPE,
            )

    return NoImageShape()


def extract_image(response: Any, provider: str = "provider") -> str | None:
    """Return the image reference contained in *response*, if any.

    Args:
        response: Decoded JSON body returned by a provider.
        provider: Provider name, used for logging only.

    Returns:
        A remote URL, a ``data:<mime>;base64,<data>`` URL for inline
        payloads, or ``None`` when the response carries no image.
    """
    shape = parse_response_shape(response)

    if isinstance(shape, (ImagesArrayShape, ContentUrlShape)):
        logger.info("%s returned image via %s", provider, type(shape).__name__)
        return shape.url
    if isinstance(shape, InlineDataShape):
        logger.info("%s returned inline %s image", provider, shape.mime_type)
        return f"data:{shape.mime_type};base64,{shape.data}"

    logger.info("%s did not return an image in an expected format", provider)
    return None
