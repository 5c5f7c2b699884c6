"""Backend adapters for parceldesk."""
