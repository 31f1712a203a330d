"""Pre-flight validation of the try-on input images.

Generation calls cost money, so clearly broken inputs are rejected before any
provider is contacted.  The check is a metadata-only ``HEAD`` request:

- a non-2xx status fails validation
- a content type that does not start with ``image/`` fails validation
- a small content-length is only logged (tiny real images are accepted)
- transport errors and URLs httpx cannot parse are logged and treated as
  inconclusive, and the call proceeds so the provider gets to judge the image
  itself
"""

from __future__ import annotations

import asyncio
import logging

import httpx

from provador.core.errors import ImageValidationError

logger = logging.getLogger(__name__)

SUBJECT_LABEL = "avatar"
GARMENT_LABEL = "peça"


async def validate_image_url(
    client: httpx.AsyncClient,
    url: str,
    label: str,
    *,
    min_bytes: int = 5000,
) -> None:
    """Check that *url* is reachable and serves image content.

    Args:
        client: Async HTTP client used for the ``HEAD`` request.
        url: Image URL to check.
        label: Human-readable name of the image, used in error messages.
        min_bytes: Content-length below which a warning is logged.

    Raises:
        ImageValidationError: If the server answers with a non-2xx status or
            a non-image content type.
    """
    try:
        response = await client.head(url, follow_redirects=True)
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        logger.error("Failed to validate %s image: %r", label, e)
        return

    content_type = response.headers.get("content-type", "")
    content_length = response.headers.get("content-length")
    logger.info(
        "%s validation - status: %s, content-type: %s, size: %s",
        label,
        response.status_code,
        content_type,
        content_length,
    )

    if not response.is_success:
        raise ImageValidationError(
            f"A imagem do {label} não está acessível ({response.status_code})"
        )

    if not content_type.lower().startswith("image/"):
        raise ImageValidationError(f"A URL do {label} não parece ser uma imagem válida")

    if content_length and content_length.isdigit() and int(content_length) < min_bytes:
        logger.warning("%s image seems very small: %s bytes", label, content_length)


async def validate_inputs(
    client: httpx.AsyncClient,
    subject_url: str,
    garment_url: str,
    *,
    min_bytes: int = 5000,
) -> None:
    """Validate the subject and garment images concurrently.

    Raises:
        ImageValidationError: From whichever check failed.
    """
    await asyncio.gather(
        validate_image_url(client, subject_url, SUBJECT_LABEL, min_bytes=min_bytes),
        validate_image_url(client, garment_url, GARMENT_LABEL, min_bytes=min_bytes),
    )
