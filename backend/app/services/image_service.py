"""
Annuaire Backend — Listing Image Normalisation
================================================

What:  Turns the base64 images sent with a signup into storable data URIs.
Why:   Images live inline on the professional record; clients send either a
       full `data:image/...;base64,` URI or bare base64.
Who:   Called by SubscriptionService when a new listing is created.

Rules:
    1. Values shorter than MIN_IMAGE_LENGTH are ignored (placeholders, "null")
    2. An existing data URI prefix is kept, bare base64 is wrapped as PNG
    3. The payload must stay within the base64 alphabet; otherwise the image
       is dropped with a warning and the signup goes on without it
    4. At most GALLERY_SLOTS gallery images are kept, in the order sent

The image bytes are never decoded or written to disk, and never logged.
"""

import logging
import re
from typing import Any, List, Optional

from app.models.professional import GALLERY_SLOTS

logger = logging.getLogger(__name__)

MIN_IMAGE_LENGTH = 100
DEFAULT_MIME_PREFIX = "data:image/png;base64,"

_DATA_URI = re.compile(r"^data:image/[A-Za-z0-9.+-]+;base64,", re.IGNORECASE)
_BASE64 = re.compile(r"^[A-Za-z0-9+/]*={0,2}$")
_WHITESPACE = re.compile(r"\s+")


class ImageService:
    """Stateless; safe to share."""

    def normalize_image(self, value: Any, label: str = "image") -> Optional[str]:
        """
        Data URI for `value`, or None when there is no usable image.

        Args:
            value: base64 string, with or without a data URI prefix
            label: name used in log lines ("profile", "gallery 2", ...)
        """
        if not isinstance(value, str) or len(value) < MIN_IMAGE_LENGTH:
            return None

        match = _DATA_URI.match(value)
        if match:
            prefix = match.group(0)
            payload = value[match.end():]
        else:
            prefix = DEFAULT_MIME_PREFIX
            payload = value

        payload = _WHITESPACE.sub("", payload)
        if not payload or not _BASE64.match(payload):
            logger.warning(
                "Dropping %s: payload is not valid base64 (%d chars)",
                label,
                len(value),
            )
            return None

        return prefix + payload

    def normalize_gallery(self, values: Any) -> List[str]:
        """Normalised gallery images, at most GALLERY_SLOTS of them."""
        if not isinstance(values, list):
            return []
        images = []
        for index, value in enumerate(values[:GALLERY_SLOTS], start=1):
            image = self.normalize_image(value, label=f"gallery image {index}")
            if image:
                images.append(image)
        return images


image_service = ImageService()
