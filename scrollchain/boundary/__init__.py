"""
Boundary layer for external system integrations.

Ledger and key-value store contracts, plus the implementations the engine
ships with (in-memory ledger, in-memory and SQL key-value stores).
"""
