"""Services Layer — orchestrates store reads, core rules and store writes.

Invariants:
    - One service per aggregate (accounts, groups, categories, records) plus auth
    - Services own the commit boundary and raise typed EZWalletErrors
"""
