"""Deterministic genesis anchoring for the platform and its authors."""

from scrollchain.core.genesis.anchor import (
    AUTHOR_DOMAIN_TAG,
    ROOT_DOMAIN_TAG,
    GenesisAnchor,
)

__all__ = ["AUTHOR_DOMAIN_TAG", "ROOT_DOMAIN_TAG", "GenesisAnchor"]
