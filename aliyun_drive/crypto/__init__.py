"""
Content proof helpers for rapid (dedup) uploads.
"""

from aliyun_drive.crypto.proof import (
    ProofOffsetFunc,
    calc_proof,
    calc_proof_code,
    calc_sha1,
    zero_proof_offset,
)

__all__ = [
    "ProofOffsetFunc",
    "calc_proof",
    "calc_proof_code",
    "calc_sha1",
    "zero_proof_offset",
]
