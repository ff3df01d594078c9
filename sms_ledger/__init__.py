"""
SMS Ledger
==========

Ledger and verification engine for merchant-payment SMS notifications.

- amounts.py   -> amount text normalization
- models/      -> Transaction (PENDING -> COMPLETED) and raw SMS backups
- store/       -> LedgerStore contract, SQL and in-memory backends
- services/    -> ingestion, verification, statistics
- routers/     -> FastAPI endpoints (JSON API + form API used by the Android client)
"""

__version__ = "1.0.0"

__all__ = ["__version__"]
