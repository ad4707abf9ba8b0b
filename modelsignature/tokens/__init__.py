"""
Token inspection package.

Decodes the unverified payload of a compact token for local pre-checks.
Failures are reported as None, never raised.
"""

from .codec import decode_claims, encode_segment, hash_output, is_expired, is_valid_format, token_age

__all__ = [
    "decode_claims",
    "encode_segment",
    "hash_output",
    "is_expired",
    "is_valid_format",
    "token_age",
]
