"""
Multilinear Polynomial Commitment (non-hiding)
==============================================

The base scheme the hiding commitment is built on. A polynomial ``f`` in
``n`` variables is committed as ``g^{f(t)}`` for a secret trapdoor point
``t = (t_0, ..., t_{n-1})``; an opening at ``z`` proves

    f(X) - f(z) = Σ_i (X_i - z_i) · q_i(X_{i+1}, ..., X_{n-1})

with one quotient commitment ``g^{q_i(t)}`` per variable.

Public parameters (dict):
-------------------------
- 'backend':      the PairingBackend
- 'num_vars':     n
- 'g', 'h':       generators of G1 and G2
- 'powers_of_g':  list of n tables; table i has 2^{n-i} entries
                  g^{Π_{j≥i} eq(t_j, x_j)} over x ∈ {0,1}^{n-i}
- 'powers_of_h':  the same tables over h
- 'h_mask':       [h^{t_i} for i in 0..n-1]

The trapdoor ``t`` never appears in the parameters.
"""

import logging
from typing import List, Sequence

import numpy as np

from .errors import DimensionMismatch, InvalidNumberOfVariables
from .groups import PairingBackend, get_generators
from .polynomial import DenseMultilinearExtension
from .utils import batch_mul, is_power_of_two, log_2, msm_g1, pair_prod, timed

logger = logging.getLogger(__name__)


def eq_extension(t: Sequence[int], modulus: int) -> List[np.ndarray]:
    """
    Tables of eq(t_i, x_i) = t_i·x_i + (1 - t_i)(1 - x_i) over {0,1}^n.

    Entry i is a 2^n table in which only bit i of the index matters.
    """
    dim = len(t)
    index = np.arange(1 << dim)
    result = []
    for i in range(dim):
        ti = int(t[i]) % modulus
        xi = ((index >> i) & 1).astype(object)
        result.append((2 * ti * xi - xi - ti + 1) % modulus)
    return result


def remove_dummy_variable(poly: np.ndarray, pad: int) -> np.ndarray:
    """Fix the first ``pad`` variables of ``poly`` (evaluation form) to zero."""
    if pad == 0:
        return poly.copy()
    if not is_power_of_two(len(poly)):
        raise DimensionMismatch("size of polynomial should be power of two")
    nv = log_2(len(poly)) - pad
    return poly[[x << pad for x in range(1 << nv)]]


def setup_with_trapdoor(backend: PairingBackend, t: Sequence[int], g, h) -> dict:
    """
    Build the parameter tables for trapdoor ``t`` and generators ``g``, ``h``.

    Each elimination step multiplies one more eq factor into the running
    product, from the last variable down to the first, and records the product
    restricted to the variables it depends on.
    """
    num_vars = len(t)
    if num_vars < 1:
        raise InvalidNumberOfVariables("constant polynomial not supported")
    p = backend.order

    eq = eq_extension(t, p)
    eq_arr = [None] * num_vars
    base = eq[num_vars - 1]
    for i in reversed(range(num_vars)):
        eq_arr[i] = remove_dummy_variable(base, i)
        if i != 0:
            base = (base * eq[i - 1]) % p

    with timed(f"multilinear setup tables for {num_vars} variables"):
        powers_of_g = [batch_mul(g, eq_arr[i], backend) for i in range(num_vars)]
        powers_of_h = [batch_mul(h, eq_arr[i], backend) for i in range(num_vars)]
        h_mask = batch_mul(h, t, backend)

    return {
        'backend': backend,
        'num_vars': num_vars,
        'g': g,
        'h': h,
        'powers_of_g': powers_of_g,
        'powers_of_h': powers_of_h,
        'h_mask': h_mask,
    }


def setup(backend: PairingBackend, num_vars: int, rng=None) -> dict:
    """
    Generate standalone public parameters for ``num_vars`` variables.

    The trapdoor is sampled here and discarded once the tables exist.
    """
    if num_vars is None or num_vars < 1:
        raise InvalidNumberOfVariables(f"num_vars must be >= 1, got {num_vars}")
    g, h = get_generators(backend, rng)
    t = [backend.random_int(rng) for _ in range(num_vars)]
    params = setup_with_trapdoor(backend, t, g, h)
    del t
    return params


def trim(params: dict, num_variables: int) -> tuple:
    """
    Restrict the parameters to the last ``num_variables`` trapdoor coordinates.

    Returns
    -------
    (ck, vk) : tuple of dict
        ck has 'nv', 'g', 'h', 'powers_of_g', 'powers_of_h';
        vk has 'nv', 'g', 'h', 'h_mask_random'.
    """
    total = params['num_vars']
    if num_variables is None or not 1 <= num_variables <= total:
        raise InvalidNumberOfVariables(
            f"cannot trim a {total}-variable SRS to {num_variables} variables")
    to_reduce = total - num_variables
    ck = {
        'backend': params['backend'],
        'nv': num_variables,
        'g': params['g'],
        'h': params['h'],
        'powers_of_g': params['powers_of_g'][to_reduce:],
        'powers_of_h': params['powers_of_h'][to_reduce:],
    }
    vk = {
        'backend': params['backend'],
        'nv': num_variables,
        'g': params['g'],
        'h': params['h'],
        'h_mask_random': params['h_mask'][to_reduce:],
    }
    return ck, vk


def commit(ck: dict, polynomial: DenseMultilinearExtension) -> dict:
    """Commitment ``{'nv', 'g_product'}`` with ``g_product = g^{f(t)}``."""
    if polynomial.num_vars != ck['nv']:
        raise DimensionMismatch(
            f"polynomial has {polynomial.num_vars} variables, key supports {ck['nv']}")
    g_product = msm_g1(ck['powers_of_g'][0], polynomial.evaluations, ck['backend'])
    return {'nv': polynomial.num_vars, 'g_product': g_product}


def open(ck: dict, polynomial: DenseMultilinearExtension, point: Sequence) -> dict:
    """
    Opening proof of ``polynomial`` at ``point``.

    Round i splits the current table r over variables i..n-1 into
    q = r(X_i=1) - r(X_i=0) and folds r at point[i]. The quotient is committed
    against table i as a function that ignores X_i; since Σ_{x_i} eq(t_i, x_i) = 1
    this yields g^{q(t_{i+1}, ...)}.
    """
    backend = ck['backend']
    nv = ck['nv']
    if polynomial.num_vars != nv:
        raise DimensionMismatch(
            f"polynomial has {polynomial.num_vars} variables, key supports {nv}")
    if len(point) != nv:
        raise DimensionMismatch(f"point has {len(point)} coordinates, expected {nv}")
    p = backend.order

    r = polynomial.evaluations
    proofs = []
    with timed(f"multilinear open with {nv} variables"):
        for i in range(nv):
            z = int(point[i]) % p
            low, high = r[0::2], r[1::2]
            q = (high - low) % p
            r = (low * (1 - z) + high * z) % p
            proofs.append(msm_g1(ck['powers_of_g'][i], np.repeat(q, 2), backend))
    return {'proofs': proofs, 'random_v': None}


def check(vk: dict, commitment: dict, point: Sequence, value, proof: dict) -> bool:
    """
    Verify e(C · g^{-v}, h) == ∏_i e(π_i, h^{t_i} · h^{-z_i}).
    """
    backend = vk['backend']
    nv = vk['nv']
    if len(point) != nv or len(proof['proofs']) != nv:
        raise DimensionMismatch(
            f"point/proof lengths {len(point)}/{len(proof['proofs'])} do not match nv={nv}")

    left = backend.pair(commitment['g_product'] * (vk['g'] ** backend.neg(value)), vk['h'])
    rights = [vk['h_mask_random'][i] * (vk['h'] ** backend.neg(point[i])) for i in range(nv)]
    right = pair_prod(proof['proofs'], rights, backend)
    return left == right
