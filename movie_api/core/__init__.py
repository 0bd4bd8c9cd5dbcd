"""Core Layer — pure logic with no I/O: error hierarchy and form decoding.

Invariants:
    - core/ never imports from api/ or infrastructure/
"""
