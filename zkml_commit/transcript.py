"""
Fiat-Shamir Transcript
======================

A hash-based transcript standing in for the interactive verifier. Prover and
verifier must make the same sequence of ``append_*`` and
``get_scalar_challenge`` calls; any divergence yields different challenges
and the proof fails to verify.

Domain Separation:
------------------
- The transcript is seeded with a protocol label (``config.transcript_label``
  unless given).
- Every absorbed message is framed as ``len(label) || label || len(data) || data``.
- Challenges are hashed to ZR with prefix b"HC" and immediately absorbed back,
  so two consecutive challenges under the same label differ.

According to charm-crypto documentation:
- Use group.hash(data, ZR) to hash arbitrary data to a scalar in Z_p
"""

import hashlib
from typing import Sequence

from charm.toolbox.pairinggroup import ZR

from .config import config
from .encoding import encode_scalar, encode_scalars, serialize_for_transcript
from .groups import PairingBackend


class Transcript:
    """
    Append-only Fiat-Shamir state for one proof session.

    Parameters
    ----------
    backend : PairingBackend
        The pairing backend challenges are drawn from
    label : bytes, optional
        Protocol label for domain separation
    """

    def __init__(self, backend: PairingBackend, label: bytes = None):
        self.backend = backend
        self._state = hashlib.sha256()
        if label is None:
            label = config.transcript_label_bytes
        self._absorb(b"dom-sep", label)

    def _absorb(self, label: bytes, data: bytes):
        self._state.update(len(label).to_bytes(4, 'big') + label)
        self._state.update(len(data).to_bytes(8, 'big') + data)

    def append_message(self, label: bytes, message: bytes):
        self._absorb(label, message)

    def append_serializable(self, label: bytes, value):
        """Absorb the canonical encoding of ``value`` under ``label``."""
        self._absorb(label, serialize_for_transcript(self.backend, value))

    def append_scalar(self, label: bytes, value):
        self._absorb(label, encode_scalar(self.backend, value))

    def append_scalars(self, label: bytes, values: Sequence):
        self._absorb(label, encode_scalars(self.backend, values))

    def get_scalar_challenge(self, label: bytes) -> ZR:
        """Derive a field element from the current state, then absorb it."""
        self._absorb(b"challenge", label)
        seed = self._state.copy().digest()
        challenge = self.backend.hash_to_scalar(b"HC" + seed)
        self._absorb(label, encode_scalar(self.backend, challenge))
        return challenge

    def get_scalar_challenges(self, label: bytes, n: int) -> list:
        return [self.get_scalar_challenge(label) for _ in range(n)]
