"""
Package configuration.

Defaults are read from environment variables once at import time; the global
``config`` instance is what the rest of the package consults.
"""

import os

DEFAULT_PAIRING_CURVE = os.getenv('ZKML_PAIRING_CURVE', 'BN254')

# Degree of the standalone mask SRS used for sumcheck masks
DEFAULT_MASK_SRS_DEGREE = int(os.getenv('ZKML_MASK_SRS_DEGREE', 5))

DEFAULT_HIDING_BOUND = int(os.getenv('ZKML_HIDING_BOUND', 5))

DEFAULT_TRANSCRIPT_LABEL = os.getenv('ZKML_TRANSCRIPT_LABEL', 'zkml-commit')


class Config:
    """Runtime configuration"""

    def __init__(self):
        self.pairing_curve = DEFAULT_PAIRING_CURVE
        self.mask_srs_degree = DEFAULT_MASK_SRS_DEGREE
        self.hiding_bound = DEFAULT_HIDING_BOUND
        self.transcript_label = DEFAULT_TRANSCRIPT_LABEL

    @property
    def transcript_label_bytes(self):
        return self.transcript_label.encode('utf-8')


config = Config()
