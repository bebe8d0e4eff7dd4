"""
Mask Polynomial Commitment
==========================

A PST13-style commitment specialized to ``MaskPolynomial``: every term touches
a single variable, so the structured reference string only needs powers
``beta_i^d`` of one trapdoor coordinate at a time, and opening at a point
reduces to one univariate division per variable.

SRS (dict returned by ``special_setup``):
-----------------------------------------
- 'backend':           the PairingBackend
- 'num_vars':          n
- 'max_degree':        per-variable degree bound D
- 'powers_of_g':       {(): g} ∪ {(i, d): g^{beta_i^d} for i < n, 1 ≤ d ≤ D}
- 'gamma_g':           blinding generator in G1
- 'powers_of_gamma_g': [[gamma_g^{beta_i^j} for j in 1..D+1] for i < n]
- 'h':                 generator of G2
- 'beta_h':            [h^{beta_i} for i < n]

Commitment to g(X):  C = ∏_term powers_of_g[term]^{coeff} = g^{g(beta)}

Opening at z:  w_i = g^{q_i(beta)} with g(X) - g(z) = Σ_i (X_i - z_i) q_i(X_i)

Check:  e(C · g^{-v}, h) == ∏_i e(w_i, h^{beta_i} · h^{-z_i})

Notes
-----
``powers_of_gamma_g`` is produced for a hiding extension of openings
(blinding polynomial commitments). Openings here are not blinded; hiding comes
from the mask itself.
"""

import logging
from typing import List, Sequence

from .errors import (
    DegreeIsZero, DegreeTooLarge, DimensionMismatch, InvalidNumberOfVariables, MissingTermInKey,
)
from .groups import PairingBackend
from .polynomial import MaskPolynomial
from .utils import batch_mul, msm_g1, pair_prod, timed

logger = logging.getLogger(__name__)


def check_dimensions(max_degree: int, num_vars: int):
    if num_vars is None or num_vars < 1:
        raise InvalidNumberOfVariables(f"num_vars must be >= 1, got {num_vars}")
    if max_degree < 1:
        raise DegreeIsZero("max_degree must be >= 1")


def special_setup(backend: PairingBackend, max_degree: int, num_vars: int, rng=None) -> dict:
    """
    Generate a mask SRS with fresh trapdoors.

    Parameters
    ----------
    backend : PairingBackend
        The pairing backend
    max_degree : int
        Per-variable degree bound D (>= 1)
    num_vars : int
        Number of variables n (>= 1)
    rng : random.Random-compatible, optional
        Randomness source; charm's generator when omitted

    Raises
    ------
    InvalidNumberOfVariables
        If ``num_vars`` is None or < 1
    DegreeIsZero
        If ``max_degree`` < 1
    """
    check_dimensions(max_degree, num_vars)
    betas = [backend.random_int(rng) for _ in range(num_vars)]
    params = special_setup_with_beta(backend, max_degree, num_vars, betas, rng)
    del betas
    return params


def special_setup_with_beta(backend: PairingBackend, max_degree: int, num_vars: int,
                            betas: Sequence[int], rng=None, g=None, h=None) -> dict:
    """
    Generate a mask SRS for given trapdoors ``betas``.

    ``g`` and ``h`` may be supplied so that another scheme sharing the same
    trapdoors also shares generators; otherwise they are sampled.
    """
    check_dimensions(max_degree, num_vars)
    if len(betas) != num_vars:
        raise DimensionMismatch(f"{len(betas)} trapdoors given for {num_vars} variables")
    p = backend.order
    betas = [int(b) % p for b in betas]

    if g is None:
        g = backend.random_g1(rng)
    gamma_g = backend.random_g1(rng)
    if h is None:
        h = backend.random_g2(rng)

    with timed(f"mask setup with {num_vars} variables and max degree {max_degree}"):
        # Single-variable monomials X_i^d for 1 <= d <= max_degree
        terms = [(var, degree) for degree in range(1, max_degree + 1) for var in range(num_vars)]
        values = [pow(betas[var], degree, p) for var, degree in terms]
        powers_of_g = dict(zip(terms, batch_mul(g, values, backend)))
        powers_of_g[()] = g

        powers_of_gamma_g = [
            batch_mul(gamma_g, [pow(betas[i], j, p) for j in range(1, max_degree + 2)], backend)
            for i in range(num_vars)
        ]
        beta_h = batch_mul(h, betas, backend)

    return {
        'backend': backend,
        'num_vars': num_vars,
        'max_degree': max_degree,
        'powers_of_g': powers_of_g,
        'gamma_g': gamma_g,
        'powers_of_gamma_g': powers_of_gamma_g,
        'h': h,
        'beta_h': beta_h,
    }


def trim(params: dict, supported_degree: int) -> tuple:
    """
    Keep only monomials of degree <= ``supported_degree``.

    Returns
    -------
    (ck, vk) : tuple of dict
    """
    if supported_degree < 1:
        raise DegreeIsZero("supported_degree must be >= 1")
    if supported_degree > params['max_degree']:
        raise DegreeTooLarge(
            f"supported_degree {supported_degree} exceeds max_degree {params['max_degree']}")

    powers_of_g = {
        term: elem for term, elem in params['powers_of_g'].items()
        if not term or term[1] <= supported_degree
    }
    ck = {
        'backend': params['backend'],
        'num_vars': params['num_vars'],
        'supported_degree': supported_degree,
        'max_degree': params['max_degree'],
        'powers_of_g': powers_of_g,
        'gamma_g': params['gamma_g'],
        'powers_of_gamma_g': [row[:supported_degree + 1] for row in params['powers_of_gamma_g']],
    }
    vk = {
        'backend': params['backend'],
        'num_vars': params['num_vars'],
        'supported_degree': supported_degree,
        'max_degree': params['max_degree'],
        'g': params['powers_of_g'][()],
        'gamma_g': params['gamma_g'],
        'h': params['h'],
        'beta_h': list(params['beta_h']),
    }
    return ck, vk


def _commit_terms(ck: dict, polynomial: MaskPolynomial):
    powers_of_g = ck['powers_of_g']
    bases, scalars = [], []
    for coeff, term in polynomial.terms():
        try:
            bases.append(powers_of_g[term])
        except KeyError:
            raise MissingTermInKey(f"term {term!r} not covered by committer key") from None
        scalars.append(coeff)
    return msm_g1(bases, scalars, ck['backend'])


def commit(ck: dict, polynomial: MaskPolynomial):
    """
    Non-hiding commitment g^{g(beta)} to a mask polynomial.

    Raises ``MissingTermInKey`` when the polynomial uses a variable or degree
    the key does not cover.
    """
    if polynomial.num_vars > ck['num_vars']:
        raise DimensionMismatch(
            f"mask has {polynomial.num_vars} variables, key supports {ck['num_vars']}")
    return _commit_terms(ck, polynomial)


def divide_at_point(polynomial: MaskPolynomial, point: Sequence) -> List[MaskPolynomial]:
    """
    Quotients q_0..q_{n-1} with g(X) - g(z) = Σ_i (X_i - z_i) q_i(X).

    Each term c·X_i^d is repeatedly divided by (X_i - z_i): the highest power
    moves to the quotient while the coefficient picks up a factor z_i, leaving
    c·z_i^d as a constant remainder. Constant terms are dropped since the final
    remainder is g(z), which the verifier accounts for separately.
    """
    num_vars = polynomial.num_vars
    p = polynomial.modulus
    if len(point) < num_vars:
        raise DimensionMismatch(f"point has {len(point)} coordinates, mask has {num_vars} variables")
    if polynomial.is_zero():
        return [MaskPolynomial(num_vars, [], p) for _ in range(num_vars)]

    z = [int(c) % p for c in point]
    quotients = []
    cur = polynomial.terms()
    for i in range(num_vars):
        quotient_terms = []
        remainder_terms = []
        for coeff, term in cur:
            if not term:
                continue
            var, power = term
            if var != i:
                remainder_terms.append((coeff, term))
                continue
            while power > 1:
                power -= 1
                quotient_terms.append((coeff, (i, power)))
                coeff = coeff * z[i] % p
            quotient_terms.append((coeff, ()))
            remainder_terms.append((z[i] * coeff % p, ()))
        quotients.append(MaskPolynomial(num_vars, quotient_terms, p))
        cur = remainder_terms
    return quotients


def special_open(ck: dict, polynomial: MaskPolynomial, point: Sequence) -> dict:
    """
    Opening proof ``{'w': [G1] * n, 'random_v': None}`` of the mask at ``point``.
    """
    with timed(f"mask open of degree {polynomial.degree()}"):
        witnesses = divide_at_point(polynomial, point)
        w = [_commit_terms(ck, q) for q in witnesses]
    return {'w': w, 'random_v': None}


def open(ck: dict, polynomial: MaskPolynomial, point: Sequence) -> tuple:
    """``(proof, evaluation)`` of the mask at ``point``."""
    if len(point) != polynomial.num_vars:
        raise DimensionMismatch(
            f"point has {len(point)} coordinates, mask has {polynomial.num_vars} variables")
    proof = special_open(ck, polynomial, point)
    backend = ck['backend']
    return proof, backend.scalar(polynomial.evaluate(point))


def check(vk: dict, commitment, point: Sequence, value, proof: dict) -> bool:
    """
    Verify that ``commitment`` opens to ``value`` at ``point``.

    Returns False when the pairing equation fails; raises ``DimensionMismatch``
    if the point or proof length does not match the key.
    """
    backend = vk['backend']
    n = vk['num_vars']
    if len(point) != n or len(proof['w']) != n:
        raise DimensionMismatch(
            f"point/proof lengths {len(point)}/{len(proof['w'])} do not match num_vars={n}")

    combined = commitment * (vk['g'] ** backend.neg(value))
    if proof.get('random_v') is not None:
        combined *= vk['gamma_g'] ** backend.neg(proof['random_v'])

    left = backend.pair(combined, vk['h'])
    rights = [vk['beta_h'][i] * (vk['h'] ** backend.neg(point[i])) for i in range(n)]
    right = pair_prod(proof['w'], rights, backend)
    return left == right
