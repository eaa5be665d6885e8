"""Infrastructure layer - external systems integration.

This layer contains implementations for:
- mpv (process lifecycle and JSON IPC)
- Persistence (SQLite repositories)
- Providers (local files)
"""
