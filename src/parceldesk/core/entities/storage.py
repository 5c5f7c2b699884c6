"""Blob storage entity."""

from dataclasses import dataclass


@dataclass(frozen=True)
class StoredObject:
    """Descriptor of an object written to blob storage."""

    bucket: str
    path: str
    size: int
    content_type: str
