"""Core Layer — session verification and consistency rules, no IO, no async, no DB.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, or db/
    - Rule functions return rejection dicts or plans; they never raise domain errors

Design Decisions:
    - Functional core separated from imperative shell: the services fetch
      snapshots, ask the core, then write
"""
