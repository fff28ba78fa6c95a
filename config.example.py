# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
This file exists to make the repo self-documenting even without opening .env.
"""

ENV_VARS = {
    # App / logging
    "TODO_APP_NAME": "App display name (default: todolist).",
    "TODO_LOG_LEVEL": "Console logging level (default: INFO). The log file always gets DEBUG.",
    # Connectors
    "TODO_CONSOLE_ENABLED": "Run the interactive console (true/false, default: true).",
    # Display
    "TODO_DATE_FORMAT": "strftime format for the 'updated' column (default: %d/%m/%Y).",
    # Paths (gitignored)
    "TODO_DATA_DIR": "Local data directory, also holds todolist.log (default: .local/todolist).",
    "TODO_TASKS_DB_PATH": "Task SQLite path (default: <data_dir>/todolist.sqlite3).",
}
