"""Route Modules — one file per resource/concern.

Invariants:
    - Each module defines its own APIRouter
    - Routes never contain business logic beyond validation and persistence

Design Decisions:
    - Explicit registration in main.py over auto-discovery
"""
