from functools import lru_cache

from supabase import create_client, Client

from jobboard.config import SUPABASE_URL, SUPABASE_KEY


@lru_cache
def get_supabase_client() -> Client:
  """Create the shared Supabase client on first use."""
  if not SUPABASE_URL or not SUPABASE_KEY:
    raise RuntimeError("SUPABASE_URL and SUPABASE_KEY must be set")
  return create_client(SUPABASE_URL, SUPABASE_KEY)
