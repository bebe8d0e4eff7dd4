"""
Error Types
===========

Configuration errors (bad dimensions or degrees at setup/trim) and dimension
mismatches are raised as exceptions. Verification failures are NOT exceptions:
``check`` functions return ``False`` and the sumcheck wrapper returns a
rejected ``SumcheckVerdict``.

The configuration and dimension errors also derive from ``ValueError`` so that
callers written against plain ``ValueError`` keep working.
"""


class ZKMLError(Exception):
    """Base class for every error raised by this package."""


class InvalidNumberOfVariables(ZKMLError, ValueError):
    """The requested number of variables is missing, < 1, or exceeds the SRS."""


class DegreeIsZero(ZKMLError, ValueError):
    """A degree bound of zero was requested."""


class DegreeTooLarge(ZKMLError, ValueError):
    """A trim asked for a degree larger than the SRS supports."""


class DimensionMismatch(ZKMLError, ValueError):
    """Polynomial, key and point disagree on the number of variables."""


class InvalidMaskTerm(ZKMLError, ValueError):
    """A mask polynomial term touches more than one variable."""


class MissingTermInKey(ZKMLError, KeyError):
    """A polynomial term has no matching power in the committer key."""


class SerializationError(ZKMLError, ValueError):
    """Malformed, truncated or out-of-range canonical encoding."""


class SumcheckError(ZKMLError):
    """A sumcheck round message is inconsistent with the running claim."""
