"""Image store boundary.

Images are rendered and uploaded elsewhere; the pipeline only asks for the
public URL of an alert's image and records it on the alert before the
extended view is built.
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional, Sequence

from ..models import IMAGE_ANNOTATION, Alert


logger = logging.getLogger(__name__)


class ImageStoreError(Exception):
    """Raised by image stores when an image lookup fails."""
    pass


class ImageStore(ABC):
    """Looks up the public URL of the image attached to an alert."""

    @abstractmethod
    async def url_for(self, alert: Alert) -> Optional[str]:
        """Return the public image URL for the alert, or None."""
        pass


class UnavailableImageStore(ImageStore):
    """Image store used when images are disabled."""

    async def url_for(self, alert: Alert) -> Optional[str]:
        return None


async def with_stored_images(store: ImageStore, alerts: Sequence[Alert]) -> int:
    """Annotate alerts with the public URL of their stored image.

    Lookup failures are logged and skipped; a missing image never blocks
    a notification.

    Returns:
        Number of alerts that received an image URL
    """
    attached = 0
    for alert in alerts:
        try:
            url = await store.url_for(alert)
        except ImageStoreError as e:
            logger.warning(f"Failed to look up image for alert {alert.labels}: {e}")
            continue
        except Exception as e:
            logger.warning(f"Unexpected error looking up image for alert {alert.labels}: {e}")
            continue
        if url:
            alert.annotations[IMAGE_ANNOTATION] = url
            attached += 1
    return attached
