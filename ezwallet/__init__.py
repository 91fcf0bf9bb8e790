"""EZWallet Core — access control and referential integrity for a shared expense store.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)
"""
