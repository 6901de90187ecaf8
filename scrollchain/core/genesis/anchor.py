"""
Genesis anchor.

Derives and verifies the deterministic hashes that seed the platform root
and every author's chain, publishes genesis units to the ledger and
validates them on read-back.

    root hash   = Hash("GGEN" || canonical JSON of network/version/protocol/timestamp)
    author hash = Hash("UGEN" || author identity || root unit id || label)

Structural problems on read-back and hash mismatches are fatal
(GenesisValidationError); unexpected protocol or version tags only warn.

Dependencies: asyncio, json (stdlib), scrollchain.core.capabilities, scrollchain.core.codec
System role: Identity anchoring for the platform and its authors
"""

import asyncio
import json
import logging
import time
from typing import Any, Callable

from scrollchain.boundary.db.kv_store import KeyValueStore
from scrollchain.boundary.ledger.base import Ledger, Signer
from scrollchain.configs.genesis import GenesisSettings
from scrollchain.core.capabilities import HashCapability, Sha256Hasher
from scrollchain.core.chain.head_registry import ChainHeadRegistry
from scrollchain.core.codec import decode_document, encode_document
from scrollchain.core.exceptions import GenesisValidationError, UnitDecodeError
from scrollchain.models.genesis import GenesisRecord, RootGenesis
from scrollchain.models.unit import UNIT_PROTOCOL, UnitKind
from scrollchain.observability.log_utils import short_id

logger = logging.getLogger(__name__)

ROOT_DOMAIN_TAG = "GGEN"
AUTHOR_DOMAIN_TAG = "UGEN"
ROOT_KEY = "genesis:root"

ROOT_FIELDS = ("k", "network", "version", "protocol", "timestamp", "root_hash")
AUTHOR_FIELDS = ("k", "a", "root_id", "label", "derived_hash")


class GenesisAnchor:
    """Platform root and author genesis records."""

    def __init__(
        self,
        ledger: Ledger,
        registry: ChainHeadRegistry | None = None,
        store: KeyValueStore | None = None,
        hasher: HashCapability | None = None,
        settings: GenesisSettings | None = None,
        clock: Callable[[], int] | None = None,
    ) -> None:
        """
        Initialize anchor.

        Args:
            ledger: Ledger genesis units are submitted to
            registry: Registry that records author chain anchors
            store: Key-value store that persists the platform root
            hasher: Hash capability (SHA-256 by default)
            settings: Network, version and protocol tags
            clock: Seconds since epoch for root timestamps
        """
        self.ledger = ledger
        self.registry = registry
        self.store = store
        self.hasher = hasher or Sha256Hasher()
        self.settings = settings or GenesisSettings()
        self.clock = clock or (lambda: int(time.time()))
        self._root: RootGenesis | None = None
        self._root_lock = asyncio.Lock()

    def derive_root_hash(self, network: str, version: str, protocol: str, timestamp: int) -> str:
        fields = {
            "network": network,
            "protocol": protocol,
            "timestamp": timestamp,
            "version": version,
        }
        canonical = json.dumps(fields, sort_keys=True, separators=(",", ":"))
        return self.hasher.hash((ROOT_DOMAIN_TAG + canonical).encode("utf-8"))

    def derive_author_genesis_hash(
        self,
        author_public_identity: str,
        root_id: str,
        label: str,
    ) -> str:
        """
        Deterministic identity-binding hash for an author. No I/O.

        Args:
            author_public_identity: Author public identity
            root_id: Unit id of the platform root
            label: Author display label

        Returns:
            str: Hex hash

        Raises:
            GenesisValidationError: When any input is empty
        """
        missing = [
            name
            for name, value in (
                ("author_public_identity", author_public_identity),
                ("root_id", root_id),
                ("label", label),
            )
            if not value
        ]
        if missing:
            raise GenesisValidationError("Genesis inputs must not be empty", {"missing": missing})
        material = AUTHOR_DOMAIN_TAG + author_public_identity + root_id + label
        return self.hasher.hash(material.encode("utf-8"))

    def verify(self, record: GenesisRecord) -> bool:
        """True when the record's derived hash recomputes from its fields."""
        try:
            expected = self.derive_author_genesis_hash(
                record.author_public_identity, record.root_id, record.label
            )
        except GenesisValidationError:
            return False
        return expected == record.derived_hash

    def verify_root(self, root: RootGenesis) -> bool:
        expected = self.derive_root_hash(root.network, root.version, root.protocol, root.timestamp)
        return expected == root.root_hash

    async def publish_root(self, signer: Signer, network: str | None = None) -> RootGenesis:
        """
        Publish the platform root once per process.

        Later calls (and restarts, when a store is configured) return the
        existing root without submitting anything.

        Args:
            signer: Platform signer
            network: Network name (settings default when omitted)

        Returns:
            RootGenesis: The platform root
        """
        async with self._root_lock:
            existing = await self.get_root()
            if existing is not None:
                return existing

            network = network or self.settings.network
            timestamp = self.clock()
            root_hash = self.derive_root_hash(
                network, self.settings.version, self.settings.protocol, timestamp
            )
            payload = encode_document(
                {
                    "p": UNIT_PROTOCOL,
                    "k": UnitKind.ROOT_GENESIS.value,
                    "network": network,
                    "version": self.settings.version,
                    "protocol": self.settings.protocol,
                    "timestamp": timestamp,
                    "root_hash": root_hash,
                }
            )
            token = await self.ledger.current_freshness_token()
            unit_id = await self.ledger.submit(payload, signer, token)

            root = RootGenesis(
                root_id=unit_id,
                root_hash=root_hash,
                network=network,
                version=self.settings.version,
                protocol=self.settings.protocol,
                timestamp=timestamp,
            )
            if self.store is not None:
                await self.store.set(ROOT_KEY, root.model_dump_json().encode("utf-8"))
            self._root = root

        logger.info(
            f"{__name__}:publish_root - Platform root published",
            extra={"root_id": short_id(unit_id), "network": network},
        )
        return root

    async def get_root(self) -> RootGenesis | None:
        if self._root is None and self.store is not None:
            raw = await self.store.get(ROOT_KEY)
            if raw is not None:
                self._root = RootGenesis.model_validate_json(raw)
        return self._root

    async def publish_author_genesis(self, signer: Signer, label: str) -> GenesisRecord:
        """
        Publish an author's genesis unit and anchor their chain on it.

        An author who already has a genesis gets the existing record back.

        Args:
            signer: Author signer
            label: Author display label

        Returns:
            GenesisRecord: Published record with its unit id

        Raises:
            GenesisValidationError: No platform root yet, or empty inputs
        """
        root = await self.get_root()
        if root is None:
            raise GenesisValidationError("Platform root genesis has not been published")

        identity = signer.public_identity
        if self.registry is not None:
            existing_id = await self.registry.get_genesis(identity)
            if existing_id is not None:
                return await self.read_author_genesis(existing_id)

        derived_hash = self.derive_author_genesis_hash(identity, root.root_id, label)
        payload = encode_document(
            {
                "p": UNIT_PROTOCOL,
                "k": UnitKind.AUTHOR_GENESIS.value,
                "a": identity,
                "root_id": root.root_id,
                "label": label,
                "derived_hash": derived_hash,
                "version": self.settings.version,
                "protocol": self.settings.protocol,
                "timestamp": self.clock(),
            }
        )
        token = await self.ledger.current_freshness_token()
        unit_id = await self.ledger.submit(payload, signer, token)

        if self.registry is not None:
            await self.registry.record_genesis(identity, unit_id)

        logger.info(
            f"{__name__}:publish_author_genesis - Author genesis published",
            extra={"author_id": short_id(identity), "unit_id": short_id(unit_id)},
        )
        return GenesisRecord(
            root_id=root.root_id,
            author_genesis_id=unit_id,
            author_public_identity=identity,
            label=label,
            derived_hash=derived_hash,
        )

    async def read_root(self, unit_id: str) -> RootGenesis:
        """
        Fetch and validate a platform root unit.

        Raises:
            GenesisValidationError: Missing unit, missing fields or hash mismatch
        """
        document = await self._fetch_document(unit_id, UnitKind.ROOT_GENESIS, ROOT_FIELDS)
        self._warn_on_tags(unit_id, document)

        try:
            root = RootGenesis(
                root_id=unit_id,
                root_hash=document["root_hash"],
                network=document["network"],
                version=document["version"],
                protocol=document["protocol"],
                timestamp=document["timestamp"],
            )
        except ValueError as e:
            raise GenesisValidationError(
                "Root genesis fields are invalid", {"unit_id": unit_id, "error": str(e)}
            ) from e

        if not self.verify_root(root):
            raise GenesisValidationError("Root genesis hash mismatch", {"unit_id": unit_id})
        return root

    async def read_author_genesis(self, unit_id: str) -> GenesisRecord:
        """
        Fetch and validate an author genesis unit.

        Raises:
            GenesisValidationError: Missing unit, missing fields or hash mismatch
        """
        document = await self._fetch_document(unit_id, UnitKind.AUTHOR_GENESIS, AUTHOR_FIELDS)
        self._warn_on_tags(unit_id, document)

        try:
            record = GenesisRecord(
                root_id=document["root_id"],
                author_genesis_id=unit_id,
                author_public_identity=document["a"],
                label=document["label"],
                derived_hash=document["derived_hash"],
            )
        except ValueError as e:
            raise GenesisValidationError(
                "Author genesis fields are invalid", {"unit_id": unit_id, "error": str(e)}
            ) from e

        if not self.verify(record):
            raise GenesisValidationError(
                "Author genesis hash mismatch",
                {"unit_id": unit_id, "author_id": short_id(record.author_public_identity)},
            )
        return record

    async def _fetch_document(
        self,
        unit_id: str,
        kind: UnitKind,
        required: tuple[str, ...],
    ) -> dict[str, Any]:
        payload = await self.ledger.fetch(unit_id)
        if payload is None:
            raise GenesisValidationError("Genesis unit not found", {"unit_id": unit_id})
        try:
            document = decode_document(payload, unit_id)
        except UnitDecodeError as e:
            raise GenesisValidationError(e.message, {"unit_id": unit_id}) from e

        missing = [field for field in required if document.get(field) in (None, "")]
        if missing:
            raise GenesisValidationError(
                "Genesis unit is missing required fields",
                {"unit_id": unit_id, "missing": missing},
            )
        if document["k"] != kind.value:
            raise GenesisValidationError(
                f"Expected {kind.value} unit, got {document['k']}",
                {"unit_id": unit_id},
            )
        return document

    def _warn_on_tags(self, unit_id: str, document: dict[str, Any]) -> None:
        unexpected = {}
        if document.get("p") != UNIT_PROTOCOL:
            unexpected["unit_protocol"] = document.get("p")
        if document.get("protocol") not in (None, self.settings.protocol):
            unexpected["protocol"] = document.get("protocol")
        if document.get("version") not in (None, self.settings.version):
            unexpected["version"] = document.get("version")
        if unexpected:
            logger.warning(
                f"{__name__}:_warn_on_tags - Unexpected genesis tags",
                extra={"unit_id": short_id(unit_id), "tags": unexpected},
            )
