"""
Utility Functions
=================

Multi-scalar multiplication, pairing products, and small integer helpers
shared by the commitment schemes.

Key Operations:
- Multi-scalar multiplication: Compute ∏ bases[i]^{scalars[i]}
- Pairing products: Compute ∏ e(g_i, ĥ_i)
- Hypercube index helpers: log_2, get_bits
- Timing: debug-level elapsed time for setup/open phases

According to charm-crypto documentation:
- Group operations use * for multiplication, ** for exponentiation
- Pairing is computed as pair(g1_elem, g2_elem)
"""

import logging
import time
from contextlib import contextmanager
from typing import Iterable, List, Sequence

import numpy as np
from charm.toolbox.pairinggroup import G1, G2, GT

from .errors import DimensionMismatch
from .groups import PairingBackend

logger = logging.getLogger(__name__)


def _msm(bases: Sequence, scalars: Sequence, identity, backend: PairingBackend):
    if len(bases) != len(scalars):
        raise DimensionMismatch(
            f"bases and scalars must have same length: {len(bases)} != {len(scalars)}")

    result = identity
    for base, s in zip(bases, scalars):
        s = int(s) % backend.order
        if s == 0:
            continue
        if s == 1:
            result *= base
        else:
            result *= base ** backend.scalar(s)
    return result


def msm_g1(bases: List[G1], scalars: Sequence, backend: PairingBackend) -> G1:
    """
    Compute ∏ bases[i]^{scalars[i]} in G1.

    Parameters
    ----------
    bases : List[G1]
        Base elements
    scalars : Sequence
        Scalars as ints or ZR, one per base
    backend : PairingBackend
        The pairing backend

    Returns
    -------
    G1
        The product; the identity when ``bases`` is empty.

    Notes
    -----
    Zero scalars are skipped, so sparse scalar vectors cost only their support.
    """
    return _msm(bases, scalars, backend.identity_g1(), backend)


def batch_mul(base, scalars: Iterable, backend: PairingBackend) -> list:
    """Fixed-base multiplication: ``[base ** s for s in scalars]``."""
    return [base ** backend.scalar(s) for s in scalars]


def pair_prod(g1_elems: List[G1], g2_elems: List[G2], backend: PairingBackend) -> GT:
    """
    Compute product of pairings: ∏ e(g1_elems[i], g2_elems[i]).

    Returns the GT identity for empty input.
    """
    if len(g1_elems) != len(g2_elems):
        raise DimensionMismatch(
            f"g1_elems and g2_elems must have same length: {len(g1_elems)} != {len(g2_elems)}")

    result = backend.identity_gt()
    for a, b in zip(g1_elems, g2_elems):
        result *= backend.pair(a, b)
    return result


def to_int_array(values: Iterable, modulus: int) -> np.ndarray:
    """Reduce ints or ZR values mod ``modulus`` into a numpy object array."""
    return np.array([int(v) % modulus for v in values], dtype=object)


def log_2(n: int) -> int:
    """
    ceil(log2(n)) for n >= 1; exact for powers of two.
    """
    if n < 1:
        raise ValueError(f"log_2 undefined for {n}")
    return (n - 1).bit_length()


def is_power_of_two(n: int) -> bool:
    return n > 0 and (n & (n - 1)) == 0


def get_bits(x: int, num_bits: int) -> List[bool]:
    """The ``num_bits`` low bits of ``x``, most significant first."""
    return [bool(x & (1 << (num_bits - shift - 1))) for shift in range(num_bits)]


@contextmanager
def timed(label: str):
    start = time.perf_counter()
    try:
        yield
    finally:
        logger.debug("%s took %.3fs", label, time.perf_counter() - start)
