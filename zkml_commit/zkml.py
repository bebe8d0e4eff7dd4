"""
Hiding Multilinear Commitment (ZKML)
====================================

Composes the base multilinear commitment with the mask commitment. Both are
built from the SAME trapdoor point t (the mask scheme's beta_i is t_i) and the
same generators g ∈ G1, h ∈ G2, so a sum of a base quotient commitment and a
mask quotient commitment for variable i is still checked against
h^{t_i} · h^{-z_i}.

Commit:  C = g^{f(t)} · g^{m(t)}            (m a fresh random mask)
Open:    π_i = g^{q_i^f(t)} · g^{q_i^m(t)},  v = f(z) + m(z)
Check:   e(C · g^{-v} · g^{-offset}, h) == ∏_i e(π_i, h^{t_i} · h^{-z_i})

Every commitment must use a fresh mask, consumed by exactly one opening;
reusing a mask across two proofs voids hiding.

Parameter layout:
-----------------
params = {'backend', 'num_vars', 'ml': <multilinear params>, 'mask': <mask SRS>}
ck     = {'backend', 'nv', 'ml': <ml ck>, 'mask': <mask ck>}
vk     = {'backend', 'nv', 'ml': <ml vk>, 'mask': <mask vk>}
"""

import logging
from typing import Sequence

from . import mask_pc, multilinear_pc
from .config import config
from .errors import DimensionMismatch, InvalidNumberOfVariables
from .groups import PairingBackend, get_generators
from .polynomial import DenseMultilinearExtension, MaskPolynomial, generate_mask_polynomial
from .utils import pair_prod, timed

logger = logging.getLogger(__name__)


def setup(backend: PairingBackend, num_vars: int, hiding_bound: int, rng=None) -> dict:
    """
    Generate the universal parameters for polynomials of up to ``num_vars``
    variables and masks of per-variable degree up to ``hiding_bound``.

    Raises
    ------
    InvalidNumberOfVariables
        If ``num_vars`` < 1
    DegreeIsZero
        If ``hiding_bound`` < 1
    """
    mask_pc.check_dimensions(hiding_bound, num_vars)
    logger.debug("zkml setup: num_vars=%d hiding_bound=%d", num_vars, hiding_bound)

    g, h = get_generators(backend, rng)
    t = [backend.random_int(rng) for _ in range(num_vars)]

    with timed(f"zkml setup with {num_vars} variables"):
        ml_params = multilinear_pc.setup_with_trapdoor(backend, t, g, h)
        mask_params = mask_pc.special_setup_with_beta(
            backend, hiding_bound, num_vars, t, rng, g=g, h=h)
    del t

    return {
        'backend': backend,
        'num_vars': num_vars,
        'ml': ml_params,
        'mask': mask_params,
    }


def trim(params: dict, num_variables: int, deg_for_mask: int) -> tuple:
    """
    Derive a committer/verifier key pair for ``num_variables`` variables.

    The leading ``to_reduce = params['num_vars'] - num_variables`` trapdoor
    coordinates are dropped. Mask terms on those variables are removed and the
    rest are re-indexed to ``var - to_reduce``, keeping their relative order.
    """
    total = params['num_vars']
    if num_variables is None or not 1 <= num_variables <= total:
        raise InvalidNumberOfVariables(
            f"cannot trim a {total}-variable SRS to {num_variables} variables")
    to_reduce = total - num_variables

    ck_ml, vk_ml = multilinear_pc.trim(params['ml'], num_variables)
    ck_mask, vk_mask = mask_pc.trim(params['mask'], deg_for_mask)

    ck_mask['powers_of_g'] = {
        (term if not term else (term[0] - to_reduce, term[1])): elem
        for term, elem in ck_mask['powers_of_g'].items()
        if not term or term[0] >= to_reduce
    }
    ck_mask['powers_of_gamma_g'] = ck_mask['powers_of_gamma_g'][to_reduce:]
    ck_mask['num_vars'] = num_variables
    vk_mask['beta_h'] = vk_mask['beta_h'][to_reduce:]
    vk_mask['num_vars'] = num_variables

    backend = params['backend']
    ck = {'backend': backend, 'nv': num_variables, 'ml': ck_ml, 'mask': ck_mask}
    vk = {'backend': backend, 'nv': num_variables, 'ml': vk_ml, 'mask': vk_mask}
    return ck, vk


def commit_mask(ck: dict, polynomial: MaskPolynomial):
    return mask_pc.commit(ck['mask'], polynomial)


def commit(ck: dict, polynomial: DenseMultilinearExtension, hiding_bound: int,
           mask_num_vars: int = None, rng=None) -> tuple:
    """
    Hiding commitment to ``polynomial``.

    Parameters
    ----------
    ck : dict
        Committer key from ``trim``
    polynomial : DenseMultilinearExtension
        The witness polynomial
    hiding_bound : int
        Per-variable degree of the fresh mask
    mask_num_vars : int, optional
        Number of mask variables; defaults to ``polynomial.num_vars``
    rng : random.Random-compatible, optional
        Randomness source for the mask

    Returns
    -------
    (commitment, mask) : tuple
        ``commitment`` is ``{'nv', 'g_product'}``; ``mask`` is the opening
        witness and must be used for exactly one ``open``.
    """
    backend = ck['backend']
    num_vars = mask_num_vars if mask_num_vars is not None else polynomial.num_vars
    if num_vars > polynomial.num_vars:
        raise DimensionMismatch(
            f"mask with {num_vars} variables exceeds polynomial with {polynomial.num_vars}")

    mask = generate_mask_polynomial(num_vars, hiding_bound, False, backend.order, rng)
    hiding_commitment = commit_mask(ck, mask)
    base_commitment = multilinear_pc.commit(ck['ml'], polynomial)['g_product']
    commitment = {
        'nv': polynomial.num_vars,
        'g_product': base_commitment * hiding_commitment,
    }
    return commitment, mask


def open_mask(ck: dict, polynomial: MaskPolynomial, point: Sequence) -> tuple:
    """Mask opening proof and the mask's evaluation (as an int) at ``point``."""
    proof = mask_pc.special_open(ck['mask'], polynomial, point)
    return proof, polynomial.evaluate(point[:polynomial.num_vars])


def open(ck: dict, polynomial: DenseMultilinearExtension, mask: MaskPolynomial,
         point: Sequence) -> tuple:
    """
    Open a hiding commitment at ``point``.

    Returns
    -------
    (proof, evaluation) : tuple
        ``proof`` is ``{'proofs': [G1] * nv, 'random_v': None}`` and
        ``evaluation`` is f(point) + mask(point) as ZR.
    """
    backend = ck['backend']
    base_proof = multilinear_pc.open(ck['ml'], polynomial, point)
    hiding_proof, mask_evaluation = open_mask(ck, mask, point)

    # A mask over fewer variables has zero quotients for the remaining ones
    hiding_w = hiding_proof['w'] + \
        [backend.identity_g1()] * (len(base_proof['proofs']) - len(hiding_proof['w']))
    proofs = [b * m for b, m in zip(base_proof['proofs'], hiding_w)]

    evaluation = polynomial.evaluate(point) + mask_evaluation
    return {'proofs': proofs, 'random_v': None}, backend.scalar(evaluation)


def check(vk: dict, commitment: dict, point: Sequence, value, proof: dict) -> bool:
    """
    Single combined pairing check for a hiding opening.

    Raises ``DimensionMismatch`` when the point disagrees with the key. A
    commitment or proof of the wrong size, like any failed equation, returns
    False.
    """
    backend = vk['backend']
    vk_ml, vk_mask = vk['ml'], vk['mask']
    nv = vk_ml['nv']
    if len(point) != nv:
        raise DimensionMismatch(f"point has {len(point)} coordinates, key has nv={nv}")
    if commitment['nv'] != nv or len(proof['proofs']) != nv:
        logger.info("hiding opening rejected: commitment nv=%d, %d proof elements, key nv=%d",
                    commitment['nv'], len(proof['proofs']), nv)
        return False

    combined = commitment['g_product'] * (vk_ml['g'] ** backend.neg(value))
    if proof.get('random_v') is not None:
        combined *= vk_mask['g'] ** backend.neg(proof['random_v'])
    left = backend.pair(combined, vk_ml['h'])

    rights = [vk_ml['h_mask_random'][i] * (vk_ml['h'] ** backend.neg(point[i]))
              for i in range(nv)]
    right = pair_prod(proof['proofs'], rights, backend)
    return left == right


def generate_srs(backend: PairingBackend, num_vars: int, hiding_bound: int = None,
                 rng=None) -> dict:
    """
    Commitment SRS plus an independent mask SRS for sumcheck masks.

    Returns
    -------
    dict
        ``{'poly_srs': setup(...), 'mask_srs': special_setup(config.mask_srs_degree, ...)}``
    """
    if hiding_bound is None:
        hiding_bound = config.hiding_bound
    poly_srs = setup(backend, num_vars, hiding_bound, rng)
    mask_srs = mask_pc.special_setup(backend, config.mask_srs_degree, num_vars, rng)
    return {'poly_srs': poly_srs, 'mask_srs': mask_srs}
