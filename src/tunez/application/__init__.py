"""
Application Layer

Orchestrates the play queue, the player transport and persistence.

Structure:
- services/: Application services for playback orchestration
- interfaces/: Port interfaces for infrastructure adapters
"""
