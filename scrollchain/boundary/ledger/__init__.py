"""Ledger boundary: contracts, in-memory and store-backed ledgers, local signer."""

from scrollchain.boundary.ledger.base import Ledger, Signer
from scrollchain.boundary.ledger.memory_ledger import InMemoryLedger
from scrollchain.boundary.ledger.signer import LocalSigner
from scrollchain.boundary.ledger.stored_ledger import StoreBackedLedger

__all__ = ["InMemoryLedger", "Ledger", "LocalSigner", "Signer", "StoreBackedLedger"]
