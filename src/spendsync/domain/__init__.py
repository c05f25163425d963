"""Domain layer for spendsync.

Services live in their own modules (ledger, summary, balance, reconcile,
cache, sync); this package deliberately imports nothing so the database
layer can import entities without pulling services in.
"""
