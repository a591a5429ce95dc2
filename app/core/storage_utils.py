# app/core/storage_utils.py
"""
Vendor image storage on Supabase Storage.

Only the service-role client is used here; it bypasses RLS, so it must
never leave the backend.
"""
import uuid
from functools import lru_cache

from supabase import Client, create_client

from app.core.config import get_settings

settings = get_settings()


@lru_cache
def storage_client() -> Client:
    """
    Service-role Supabase client, created on first use.

    Raises:
        RuntimeError: if SUPABASE_URL or SUPABASE_SERVICE_ROLE_KEY is not set.
    """
    if not settings.SUPABASE_URL or not settings.SUPABASE_SERVICE_ROLE_KEY:
        raise RuntimeError("Missing SUPABASE_URL / SUPABASE_SERVICE_ROLE_KEY in .env")
    return create_client(settings.SUPABASE_URL, settings.SUPABASE_SERVICE_ROLE_KEY)


def _bucket():
    return storage_client().storage.from_(settings.STORAGE_BUCKET)


def upload_to_storage(path: str, file_bytes: bytes, content_type: str) -> str:
    """
    Store `file_bytes` at `path` (overwriting) and return its public URL.

    Args:
        path: object path inside the bucket,
              e.g. "vendors/<uuid>/profile/<uuid>.png"
        file_bytes: raw file content
        content_type: MIME type saved with the object
    """
    bucket = _bucket()
    bucket.upload(path, file_bytes, {"upsert": "true", "content-type": content_type})
    return bucket.get_public_url(path)


def delete_from_storage(path: str) -> None:
    _bucket().remove([path])


def extract_path_from_public_url(url: str) -> str | None:
    """
    Map a public URL back to its object path, or None for foreign URLs.

        .../storage/v1/object/public/assets/vendors/v/profile/x.png?
        -> 'vendors/v/profile/x.png'
    """
    marker = f"/storage/v1/object/public/{settings.STORAGE_BUCKET}/"
    idx = url.find(marker)
    if idx == -1:
        return None
    path = url[idx + len(marker):]
    # get_public_url may append a query string
    return path.split("?", 1)[0] or None


def delete_public_url(url: str) -> None:
    """Delete by public URL; no-op when the URL is not in our bucket."""
    path = extract_path_from_public_url(url)
    if path:
        delete_from_storage(path)


def generate_filename(ext: str) -> str:
    return f"{uuid.uuid4().hex}.{ext}"
