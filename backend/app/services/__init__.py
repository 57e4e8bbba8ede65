"""Services Layer — license redemption, universal license, phase progression.

Invariants:
    - Services receive their RecordStore at construction (no globals)
    - Services hold no mutable state; one instance may serve concurrent callers
    - Every conditional-write outcome maps to a named result or DigipodError

Design Decisions:
    - One service per aggregate for locality
"""
