# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
Do NOT commit real keys or your user token. Use:
- .env (local, gitignored)

This file exists to make the repo self-documenting even without opening .env.example.
"""

ENV_VARS = {
    # App / logging
    "DAYLIST_APP_NAME": "App display name (default: daylist).",
    "DAYLIST_LOG_LEVEL": "Console logging level (default: INFO). The log file always gets DEBUG.",
    # Document store
    "DAYLIST_STORE_BACKEND": "auto | remote | local (default: auto => remote when URL and key are set).",
    "DAYLIST_REMOTE_URL": "Supabase/PostgREST project URL (fallback: SUPABASE_URL).",
    "DAYLIST_REMOTE_API_KEY": "Supabase anon key (fallback: SUPABASE_ANON_KEY).",
    "DAYLIST_REMOTE_TABLE": "Table holding one row per user: user_token text unique, data jsonb (default: user_data).",
    "DAYLIST_REMOTE_TIMEOUT_SECONDS": "HTTP timeout for store calls (default: 10, minimum 1).",
    # Paths (gitignored)
    "DAYLIST_DATA_DIR": "Local data directory (default: .local/daylist).",
    "DAYLIST_LOCAL_STORE_PATH": "Offline JSON store path (default: <data_dir>/documents.json).",
    "DAYLIST_USER_TOKEN_PATH": "Where the generated user token is kept (default: <data_dir>/user_token).",
    # Identity
    "DAYLIST_USER_TOKEN": "Use this token instead of the stored one (share a document across machines).",
    # Saving
    "DAYLIST_SAVE_DEBOUNCE_SECONDS": "Coalescing window before a background save (default: 0.5).",
}
