from supabase import create_client, Client
from dedcore_landing.core.config import Settings
from typing import List, Optional
import logging

logger = logging.getLogger(__name__)

SUBSCRIBERS_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS {table} (
    id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    email VARCHAR(255) UNIQUE NOT NULL,
    status VARCHAR(20) DEFAULT 'active' CHECK (status IN ('active', 'unsubscribed')),
    source VARCHAR(50) DEFAULT 'website',
    created_at TIMESTAMP WITH TIME ZONE DEFAULT NOW()
);
"""

SUBSCRIBERS_INDEX_COLUMNS = ["email", "status", "created_at", "source"]


def missing_supabase_variables(settings: Settings) -> List[str]:
    """Return the names of the Supabase variables that are not set"""
    missing = []
    if not settings.SUPABASE_URL:
        missing.append("SUPABASE_URL")
    if not (settings.SUPABASE_SERVICE_ROLE_KEY or settings.SUPABASE_ANON_KEY):
        missing.append("SUPABASE_SERVICE_ROLE_KEY")
    return missing


def create_supabase_client(settings: Settings) -> Optional[Client]:
    """
    Build the Supabase client used by the subscriber store.

    Returns None when the credentials are missing so the caller can pick
    the unconfigured store variant instead of failing at startup.
    """
    missing = missing_supabase_variables(settings)
    if missing:
        logger.warning(f"⚠️ Supabase not configured, missing: {', '.join(missing)}")
        return None

    # Server side code prefers the service role key, the anon key works with RLS policies
    key = settings.SUPABASE_SERVICE_ROLE_KEY or settings.SUPABASE_ANON_KEY
    logger.info(f"🔗 Connecting to Supabase: {settings.SUPABASE_URL[:50]}...")
    return create_client(settings.SUPABASE_URL, key)


def create_subscribers_table(client: Client, table: str) -> List[str]:
    """
    Create the subscriber table and its indexes through the exec_sql RPC.

    Returns the statements that were executed. Index failures are logged
    and skipped, a failure creating the table itself propagates.
    """
    executed = []
    table_sql = SUBSCRIBERS_TABLE_SQL.format(table=table)
    client.rpc('exec_sql', {'sql': table_sql}).execute()
    executed.append(table_sql)
    logger.info(f"✅ Table {table} ready")

    for column in SUBSCRIBERS_INDEX_COLUMNS:
        index_sql = f"CREATE INDEX IF NOT EXISTS idx_{table}_{column} ON {table}({column});"
        try:
            client.rpc('exec_sql', {'sql': index_sql}).execute()
            executed.append(index_sql)
        except Exception as e:
            logger.warning(f"⚠️ Index creation warning for {column}: {e}")

    return executed
