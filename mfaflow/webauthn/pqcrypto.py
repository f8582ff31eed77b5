"""ML-DSA signing for platform credentials, via liboqs-python."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from importlib.util import find_spec
from typing import Dict, Iterable, Optional

LOGGER = logging.getLogger(__name__)

COSE_ALG_TO_OQS: Dict[int, str] = {
    -48: "ML-DSA-44",
    -49: "ML-DSA-65",
    -50: "ML-DSA-87",
}


def oqs_installed() -> bool:
    return find_spec("oqs") is not None


def select_algorithm(requested: Iterable[int]) -> Optional[int]:
    """First algorithm from the authority's preference list we can sign with."""
    for alg in requested:
        if alg in COSE_ALG_TO_OQS:
            return alg
    return None


@dataclass
class KeyPair:
    public_key: bytes
    private_key: bytes


class SignatureSuite:
    """One ML-DSA parameter set identified by its COSE algorithm number."""

    family = "ml-dsa"

    def __init__(self, algorithm: int) -> None:
        if algorithm not in COSE_ALG_TO_OQS:
            raise ValueError(f"Unsupported COSE algorithm: {algorithm}")
        self.algorithm = algorithm
        self.oqs_name = COSE_ALG_TO_OQS[algorithm]

    def generate_keypair(self) -> KeyPair:
        # liboqs loads its shared library on import, so defer it to first use.
        import oqs

        with oqs.Signature(self.oqs_name) as signer:
            public_key = signer.generate_keypair()
            private_key = signer.export_secret_key()
        LOGGER.debug("Generated %s keypair", self.oqs_name)
        return KeyPair(public_key, private_key)

    def sign(self, private_key: bytes, payload: bytes) -> bytes:
        import oqs

        with oqs.Signature(self.oqs_name, private_key) as signer:
            return signer.sign(payload)
