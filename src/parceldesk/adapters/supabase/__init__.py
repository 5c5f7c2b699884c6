"""Adapters for a Supabase-hosted backend (REST, auth, storage) over httpx."""

from parceldesk.adapters.supabase.auth import SupabaseAuthService
from parceldesk.adapters.supabase.data_store import SupabaseDataStore
from parceldesk.adapters.supabase.storage import SupabaseStorage

__all__ = [
    "SupabaseAuthService",
    "SupabaseDataStore",
    "SupabaseStorage",
]
