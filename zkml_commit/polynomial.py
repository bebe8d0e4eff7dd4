"""
Polynomials
===========

Two polynomial shapes are used by the commitment schemes:

- ``DenseMultilinearExtension``: a multilinear polynomial given by its
  ``2^num_vars`` evaluations over the Boolean hypercube. Variable ``i`` is bit
  ``i`` of the table index, so evaluation index ``x`` corresponds to the point
  ``(x & 1, (x >> 1) & 1, ...)``.
- ``MaskPolynomial``: a sparse polynomial whose every term touches at most one
  variable, ``g(X) = c + Σ_i Σ_{d≥1} c_{i,d} X_i^d``.

All coefficients and evaluations are Python ints reduced mod ``modulus`` (the
scalar field order of the pairing backend); numpy object arrays hold the
hypercube tables.
"""

import secrets
from typing import Dict, Iterable, List, Sequence, Tuple

import numpy as np

from .errors import DimensionMismatch, InvalidMaskTerm, InvalidNumberOfVariables
from .utils import is_power_of_two, log_2, to_int_array

# A mask term is () for the constant, or (var, power) with power >= 1
Term = Tuple[int, ...]


def _default_rng():
    return secrets.SystemRandom()


def _point_ints(point: Sequence, modulus: int) -> List[int]:
    return [int(p) % modulus for p in point]


class DenseMultilinearExtension:
    """
    Multilinear polynomial in evaluation form.

    Parameters
    ----------
    num_vars : int
        Number of variables n
    evaluations : Iterable
        The 2^n evaluations (ints or ZR)
    modulus : int
        Scalar field order
    """

    def __init__(self, num_vars: int, evaluations: Iterable, modulus: int):
        table = to_int_array(evaluations, modulus)
        if len(table) != 1 << num_vars:
            raise DimensionMismatch(
                f"{len(table)} evaluations given for {num_vars} variables (need {1 << num_vars})")
        self.num_vars = num_vars
        self.modulus = modulus
        self.evaluations = table

    @classmethod
    def from_evaluations(cls, evaluations: Sequence, modulus: int) -> 'DenseMultilinearExtension':
        """Infer ``num_vars`` from a power-of-two length evaluation vector."""
        if not is_power_of_two(len(evaluations)):
            raise DimensionMismatch(
                f"evaluation vector length {len(evaluations)} is not a power of two")
        return cls(log_2(len(evaluations)), evaluations, modulus)

    @classmethod
    def rand(cls, num_vars: int, modulus: int, rng=None) -> 'DenseMultilinearExtension':
        rng = rng or _default_rng()
        return cls(num_vars, [rng.randrange(modulus) for _ in range(1 << num_vars)], modulus)

    def __len__(self):
        return len(self.evaluations)

    def __repr__(self):
        return f"DenseMultilinearExtension(num_vars={self.num_vars})"

    def to_evaluations(self) -> List[int]:
        return list(self.evaluations)

    def fix_variables(self, partial_point: Sequence) -> 'DenseMultilinearExtension':
        """Fix the lowest ``len(partial_point)`` variables."""
        if len(partial_point) > self.num_vars:
            raise DimensionMismatch(
                f"cannot fix {len(partial_point)} variables of a {self.num_vars}-variate polynomial")
        p = self.modulus
        table = self.evaluations
        for r in _point_ints(partial_point, p):
            table = (table[0::2] * (1 - r) + table[1::2] * r) % p
        return DenseMultilinearExtension(self.num_vars - len(partial_point), table, p)

    def evaluate(self, point: Sequence) -> int:
        if len(point) != self.num_vars:
            raise DimensionMismatch(
                f"point has {len(point)} coordinates, polynomial has {self.num_vars} variables")
        return int(self.fix_variables(point).evaluations[0])

    def hypercube_sum(self) -> int:
        return int(sum(self.evaluations)) % self.modulus


class MaskPolynomial:
    """
    Sparse polynomial whose terms each touch a single variable.

    Parameters
    ----------
    num_vars : int
        Number of variables
    terms : Iterable[Tuple[int, Term]]
        ``(coefficient, term)`` pairs. ``term`` is ``()`` for the constant or
        ``(var, power)``; ``(var, 0)`` is read as the constant. Repeated terms
        are summed and zero coefficients dropped.
    modulus : int
        Scalar field order

    Notes
    -----
    The single-variable restriction is structural: ``divide_at_point`` in the
    mask commitment relies on it to reduce division by ``(X_i - z_i)`` to
    univariate division. Multi-variable terms are rejected here.
    """

    def __init__(self, num_vars: int, terms: Iterable[Tuple[int, Term]], modulus: int):
        self.num_vars = num_vars
        self.modulus = modulus
        merged: Dict[Term, int] = {}
        for coeff, term in terms:
            term = self._normalize_term(term)
            merged[term] = (merged.get(term, 0) + int(coeff)) % modulus
        self._terms = {t: c for t, c in merged.items() if c != 0}

    def _normalize_term(self, term) -> Term:
        term = tuple(term)
        if len(term) == 0:
            return ()
        if len(term) != 2:
            raise InvalidMaskTerm(f"mask term {term!r} must be () or (var, power)")
        var, power = int(term[0]), int(term[1])
        if power < 0:
            raise InvalidMaskTerm(f"negative power in term {term!r}")
        if power == 0:
            return ()
        if not 0 <= var < self.num_vars:
            raise DimensionMismatch(f"term variable {var} outside 0..{self.num_vars - 1}")
        return (var, power)

    def __repr__(self):
        return f"MaskPolynomial(num_vars={self.num_vars}, terms={len(self._terms)})"

    def __eq__(self, other):
        if not isinstance(other, MaskPolynomial):
            return NotImplemented
        return (self.num_vars, self.modulus, self._terms) == \
            (other.num_vars, other.modulus, other._terms)

    def terms(self) -> List[Tuple[int, Term]]:
        """``(coefficient, term)`` pairs, constant first, then by (var, power)."""
        return [(c, t) for t, c in sorted(self._terms.items())]

    def is_zero(self) -> bool:
        return not self._terms

    @property
    def constant(self) -> int:
        return self._terms.get((), 0)

    def degree(self) -> int:
        return max((t[1] for t in self._terms if t), default=0)

    def univariate(self, var: int) -> List[int]:
        """Coefficients of the non-constant part in ``X_var``; index = power."""
        deg = max((t[1] for t in self._terms if t and t[0] == var), default=0)
        coeffs = [0] * (deg + 1)
        for t, c in self._terms.items():
            if t and t[0] == var:
                coeffs[t[1]] = c
        return coeffs

    def evaluate(self, point: Sequence) -> int:
        if len(point) != self.num_vars:
            raise DimensionMismatch(
                f"point has {len(point)} coordinates, mask has {self.num_vars} variables")
        p = self.modulus
        z = _point_ints(point, p)
        total = 0
        for t, c in self._terms.items():
            total += c if not t else c * pow(z[t[0]], t[1], p)
        return total % p

    def hypercube_sum(self) -> int:
        """Σ over {0,1}^n, in closed form: 2^n·c + 2^(n-1)·Σ_i u_i(1)."""
        n, p = self.num_vars, self.modulus
        if n == 0:
            return self.constant
        ones = sum(c for t, c in self._terms.items() if t)
        return (pow(2, n, p) * self.constant + pow(2, n - 1, p) * ones) % p


def generate_mask_polynomial(num_variables: int, deg: int, sum_to_zero: bool,
                             modulus: int, rng=None) -> MaskPolynomial:
    """
    Sample ``num_variables`` random univariate polynomials of degree ``deg`` and
    return their sum as a mask polynomial.

    Parameters
    ----------
    num_variables : int
        Number of variables of the mask
    deg : int
        Degree bound per variable
    sum_to_zero : bool
        If set, shift the first variable's constant coefficient so the mask sums
        to zero over the Boolean hypercube
    modulus : int
        Scalar field order
    rng : random.Random-compatible, optional
        Randomness source; ``secrets.SystemRandom()`` when omitted

    Returns
    -------
    MaskPolynomial

    Notes
    -----
    Over {0,1} the i-th univariate part contributes ``2·c_{i,0} + Σ_{d≥1} c_{i,d}``
    per half-cube, so subtracting half of that total from ``c_{0,0}`` zeroes the
    hypercube sum.
    """
    if num_variables < 1:
        raise InvalidNumberOfVariables(f"mask needs at least one variable, got {num_variables}")
    rng = rng or _default_rng()
    p = modulus

    mask_polynomials = []
    sum_g = 0
    for _ in range(num_variables):
        coeffs = [rng.randrange(p) for _ in range(deg + 1)]
        sum_g += 2 * coeffs[0] + sum(coeffs[1:])
        mask_polynomials.append(coeffs)

    if sum_to_zero:
        half = pow(2, -1, p)
        mask_polynomials[0][0] = (mask_polynomials[0][0] - sum_g * half) % p

    terms = []
    for var, coeffs in enumerate(mask_polynomials):
        for degree, coeff in enumerate(coeffs):
            terms.append((coeff, (var, degree)))
    return MaskPolynomial(num_variables, terms, p)
