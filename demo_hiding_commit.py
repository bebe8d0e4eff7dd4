#!/usr/bin/env python3
"""
Hiding Commitment Demo
======================

Commits to the 4-variable polynomial with evaluations 1..16, opens it at
(1,1,1,1), and runs a zero-knowledge sumcheck over the same polynomial.
"""

import logging
import random

from zkml_commit import Transcript, setup, zkml
from zkml_commit import mask_pc
from zkml_commit.config import config
from zkml_commit.polynomial import DenseMultilinearExtension
from zkml_commit.sumcheck import (
    prepare_mask, sum_over_hypercube, zk_sumcheck_prove, zk_sumcheck_verifier_wrapper,
)


def main():
    logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")
    rng = random.Random(2024)

    print("=" * 60)
    print("Hiding multilinear commitment demo")
    print("=" * 60)

    # 1. SRS
    print("\n[1] Generating SRS...")
    backend = setup()
    num_vars, hiding_bound = 4, 2
    srs = zkml.generate_srs(backend, num_vars, hiding_bound, rng)
    ck, vk = zkml.trim(srs['poly_srs'], num_vars, hiding_bound)
    print(f"✅ SRS ready on {backend.group_name} (num_vars={num_vars}, hiding_bound={hiding_bound})")

    # 2. Commit / open / check
    print("\n[2] Commit and open at (1,1,1,1)...")
    f = DenseMultilinearExtension(num_vars, range(1, 17), backend.order)
    point = [1, 1, 1, 1]
    commitment, mask = zkml.commit(ck, f, hiding_bound, rng=rng)
    proof, value = zkml.open(ck, f, mask, point)
    is_valid = zkml.check(vk, commitment, point, value, proof)
    print(f"    f(1,1,1,1) = {f.evaluate(point)}")
    print(f"    masked evaluation = {backend.to_int(value)}")
    print(f"    check: {'✅ passed' if is_valid else '❌ failed'}")

    # 3. ZK sumcheck
    print("\n[3] Zero-knowledge sumcheck of Σ f(x)...")
    mask_ck, mask_vk = mask_pc.trim(srs['mask_srs'], config.mask_srs_degree)
    products = [(1, [f])]
    claimed = sum_over_hypercube(products, backend.order)
    g, g_commit = prepare_mask(mask_ck, num_vars, 2, rng)
    zk_proof = zk_sumcheck_prove(mask_ck, products, Transcript(backend), g, g_commit)
    verdict = zk_sumcheck_verifier_wrapper(mask_vk, zk_proof, Transcript(backend), claimed)
    print(f"    claimed sum = {claimed}")
    print(f"    verdict: {'✅ accepted' if verdict else '❌ ' + verdict.reason.value}")

    if verdict:
        subclaim = verdict.subclaim
        direct = f.evaluate(subclaim['point'])
        matches = direct == backend.to_int(subclaim['expected_evaluation'])
        print(f"    subclaim matches f(point): {'✅' if matches else '❌'}")

    print("\n" + "=" * 60)


if __name__ == "__main__":
    main()
