"""External image search sources."""

from .google_images import (
    GOOGLE_CSE_URL,
    GoogleImageSearchClient,
    ImageSearchProvider,
    ProviderHit,
)

__all__ = [
    "GOOGLE_CSE_URL",
    "GoogleImageSearchClient",
    "ImageSearchProvider",
    "ProviderHit",
]
