"""Helpers for handling Supabase errors gracefully."""


def is_supabase_table_missing_error(error: Exception) -> bool:
    """
    Return True when Supabase reports that the score history table is missing.

    PostgREST surfaces this as error code PGRST205 ("Could not find the table
    'public.financial_snapshots' in the schema cache"); Postgres itself says
    "relation ... does not exist".
    """
    message = str(error or "")
    if not message:
        return False

    lowered = message.lower()
    return any(
        marker in lowered
        for marker in ("could not find the table", "pgrst205", "does not exist")
    )
