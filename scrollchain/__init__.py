"""
scrollchain: chunked content engine for size-bounded ledger payloads.

Splits documents into compressed, hash-verified chunks, publishes them as
linked units on an append-only ledger, and rebuilds documents and feeds by
walking each author's chain backward from its head.
"""

__version__ = "0.1.0"
