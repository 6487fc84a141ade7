"""Image URI validation for NFT media."""

from __future__ import annotations

from typing import List

SUPPORTED_MEDIA_FILES: List[str] = [
    "jpg",
    "jpeg",
    "png",
    "gif",
    "svg",
    "mp4",
    "mov",
    "webm",
    "mp3",
    "wav",
    "glb",
    "gltf",
]

# Only still images are advertised to creators.
ADVERTISED_IMAGE_TYPES = ("jpg", "jpeg", "png", "gif", "svg")

_MIME_TYPES = {
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "gif": "image/gif",
    "svg": "image/svg+xml",
    "mp4": "video/mp4",
    "mov": "video/quicktime",
    "webm": "video/webm",
    "mp3": "audio/mpeg",
    "wav": "audio/wav",
    "glb": "model/gltf-binary",
    "gltf": "model/gltf+json",
}

# Metaplex JSON metadata categories, keyed by MIME type prefix.
_CATEGORIES = {"image": "image", "video": "video", "audio": "audio", "model": "vr"}


def validate_image_uri(image_uri: str) -> str:
    """Return the lower-cased file extension of ``image_uri`` or raise ValueError."""
    last_segment = image_uri.split("/")[-1]
    file_parts = last_segment.split(".")

    if len(file_parts) == 1:
        raise ValueError("Wrong file type provided")

    extension = file_parts[-1].lower()
    if not extension or extension not in SUPPORTED_MEDIA_FILES:
        supported = ", ".join(ext for ext in SUPPORTED_MEDIA_FILES if ext in ADVERTISED_IMAGE_TYPES)
        raise ValueError(f"Unsupported image type: {extension}. Supported types are: {supported}")
    return extension


def get_mime_type(extension: str) -> str:
    """Map a media extension onto the MIME type written into NFT metadata."""
    try:
        return _MIME_TYPES[extension.lower()]
    except KeyError:
        raise ValueError(f"Unsupported file type: {extension}") from None


def get_media_category(extension: str) -> str:
    """Return the metadata ``properties.category`` for a supported extension."""
    return _CATEGORIES[get_mime_type(extension).split("/")[0]]
