"""
Group Initialization and the Pairing Backend
============================================

This module wraps a charm-crypto ``PairingGroup`` into the single capability
object every other module is parameterized over.

According to charm-crypto documentation (https://jhuisi.github.io/charm/tutorial.html):
- PairingGroup('BN254') provides asymmetric Type-3 pairings with a 254-bit base field
- Alternative curves: 'MNT224', 'SS512' (symmetric, but can be used)
- G1, G2 are the source groups; GT is the target group
- Pairing operation: pair(g1_elem, g2_elem) -> GT element

Notation:
---------
charm writes every group law multiplicatively. A sum of points ``P + Q`` is
``P * Q`` and a scalar multiple ``a·P`` is ``P ** a``. Scalars handled in bulk
(hypercube tables, polynomial coefficients) are plain Python ints reduced mod
the group order; they are converted to ``ZR`` only where charm needs them.
"""

import logging

from charm.toolbox.pairinggroup import PairingGroup, ZR, G1, G2, GT, pair

from .config import config

logger = logging.getLogger(__name__)

FALLBACK_CURVES = ('BN254', 'MNT224', 'SS512')


class PairingBackend:
    """
    Scalar field, G1, G2 and pairing operations for one curve.

    One backend is chosen per configuration and shared by reference; it holds
    no mutable state besides the charm group itself.

    Parameters
    ----------
    group : PairingGroup
        The initialized pairing group
    group_name : str
        The curve identifier the group was built from
    """

    def __init__(self, group: PairingGroup, group_name: str):
        self.group = group
        self.group_name = group_name
        self.order = int(group.order())

    def __repr__(self):
        return f"PairingBackend({self.group_name!r})"

    # Scalars

    def scalar(self, value) -> ZR:
        """Lift an int (or ZR) into ZR, reducing mod the group order."""
        return self.group.init(ZR, int(value) % self.order)

    def to_int(self, value) -> int:
        """Canonical int representative of an int or ZR value."""
        return int(value) % self.order

    def neg(self, value) -> ZR:
        return self.group.init(ZR, (-int(value)) % self.order)

    def random_int(self, rng=None) -> int:
        """
        Uniform scalar as an int.

        ``rng`` is any ``random.Random``-compatible source (a seeded
        ``random.Random`` in tests, ``secrets.SystemRandom()`` otherwise).
        Without one, charm's internal generator is used.
        """
        if rng is None:
            return int(self.group.random(ZR)) % self.order
        return rng.randrange(self.order)

    def hash_to_scalar(self, data: bytes) -> ZR:
        return self.group.hash(data, ZR)

    # Groups

    def random_g1(self, rng=None) -> G1:
        """
        A random G1 generator with unknown discrete log.

        With an explicit ``rng`` the point is hashed from rng output so that
        seeded runs are reproducible.
        """
        if rng is None:
            return self.group.random(G1)
        return self.group.hash(_random_bytes(rng), G1)

    def random_g2(self, rng=None) -> G2:
        if rng is None:
            return self.group.random(G2)
        return self.group.hash(_random_bytes(rng), G2)

    def identity_g1(self) -> G1:
        return self.group.init(G1, 1)

    def identity_gt(self) -> GT:
        return self.group.init(GT, 1)

    def pair(self, g1_elem: G1, g2_elem: G2) -> GT:
        return pair(g1_elem, g2_elem)

    def ismember(self, elem) -> bool:
        return self.group.ismember(elem)


def _random_bytes(rng, nbytes: int = 32) -> bytes:
    return rng.getrandbits(8 * nbytes).to_bytes(nbytes, 'big')


def setup(group_name: str = None) -> PairingBackend:
    """
    Initialize the pairing backend.

    Parameters
    ----------
    group_name : str, optional
        The pairing curve identifier. Defaults to ``config.pairing_curve``
        (``BN254`` unless overridden by ``ZKML_PAIRING_CURVE``).
        If the curve cannot be loaded the remaining entries of
        ``FALLBACK_CURVES`` are tried in order.

    Returns
    -------
    PairingBackend
        The backend for the first curve that initializes.

    Examples
    --------
    >>> backend = setup('BN254')
    >>> g = backend.random_g1()
    >>> h = backend.random_g2()
    >>> e = backend.pair(g, h)  # e is in GT
    """
    if group_name is None:
        group_name = config.pairing_curve

    candidates = [group_name] + [c for c in FALLBACK_CURVES if c != group_name]
    last_error = None
    for name in candidates:
        try:
            group = PairingGroup(name)
        except Exception as e:
            logger.warning("%s not available (%s), trying next curve", name, e)
            last_error = e
            continue
        if name != group_name:
            logger.warning("falling back from %s to %s", group_name, name)
        return PairingBackend(group, name)

    raise RuntimeError(f"no pairing curve could be initialized: {last_error}")


def get_generators(backend: PairingBackend, rng=None) -> tuple:
    """
    Sample a pair of generators ``(g, h)`` with ``g`` in G1 and ``h`` in G2.
    """
    return backend.random_g1(rng), backend.random_g2(rng)
