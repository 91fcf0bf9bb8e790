"""Infrastructure Layer — database sessions, record-store repositories, logging.

Invariants:
    - SQLAlchemy errors never escape as-is: mapped to DatabaseError
    - Repositories implement core/repository_protocols.py and never commit
"""
