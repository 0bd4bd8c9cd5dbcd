"""Movie API Package — HTTP backend for a movie catalogue.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)
"""
