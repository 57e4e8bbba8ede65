"""Infrastructure Layer — storage backends and cross-cutting concerns.

Invariants:
    - Infrastructure never imports from services/ or api/
    - Storage failures are mapped to StoreUnavailableError

Design Decisions:
    - Store backends implement core.repository_protocols.RecordStore structurally
"""
