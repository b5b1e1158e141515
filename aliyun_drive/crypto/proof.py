"""
Content proof calculation for rapid uploads.

The service identifies uploaded content by its SHA-1 and verifies the claim
with a short sample of the file ("proof code") taken at an offset derived from
the access token and the file size. When both match content it already
stores, the upload completes without any byte transfer.
"""

import base64
import hashlib
import os
from collections.abc import Callable
from typing import BinaryIO

import structlog

from aliyun_drive.exceptions import ValidationError

logger = structlog.get_logger(__name__)

CONTENT_HASH_NAME = "sha1"
PROOF_VERSION = "v1"
PROOF_SAMPLE_SIZE = 8

ProofOffsetFunc = Callable[[str, int], int]
"""Maps (access token, file size) to the byte offset of the proof sample."""


def zero_proof_offset(access_token: str, file_size: int) -> int:
    """
    Default proof offset: always sample the start of the file.

    The service derives the real offset with its own formula. Plug that
    formula into ``AliyunDriveConfig.proof_offset`` to make rapid uploads
    trigger; with this default every upload transfers its bytes.
    """
    return 0


def is_seekable(source: BinaryIO) -> bool:
    seekable = getattr(source, "seekable", None)
    return seekable is not None and seekable()


def calc_sha1(source: BinaryIO, chunk_size: int = 1024 * 1024) -> str:
    """
    Hash the whole source and rewind it.

    Args:
        source: Seekable binary stream positioned at its start.
        chunk_size: Read size in bytes.

    Returns:
        Uppercase hex SHA-1 digest.
    """
    digest = hashlib.sha1()
    while chunk := source.read(chunk_size):
        digest.update(chunk)
    source.seek(0, os.SEEK_SET)
    return digest.hexdigest().upper()


def calc_proof_code(
    source: BinaryIO,
    file_size: int,
    access_token: str,
    proof_offset: ProofOffsetFunc = zero_proof_offset,
) -> str:
    """
    Sample 8 bytes at the proof offset and rewind the source.

    Args:
        source: Seekable binary stream.
        file_size: Declared size of the content.
        access_token: Current access token.
        proof_offset: Offset derivation function.

    Returns:
        Base64-encoded sample, zero padded to 8 bytes.

    Raises:
        ValidationError: If the source cannot be positioned at the offset.
    """
    offset = proof_offset(access_token, file_size)
    try:
        position = source.seek(offset, os.SEEK_SET)
    except (OSError, ValueError) as e:
        source.seek(0, os.SEEK_SET)
        msg = f"failed to seek file to {offset}"
        raise ValidationError(msg, offset=offset) from e
    if position != offset:
        source.seek(0, os.SEEK_SET)
        msg = f"failed to seek file to {offset}"
        raise ValidationError(msg, offset=offset)

    sample = source.read(PROOF_SAMPLE_SIZE).ljust(PROOF_SAMPLE_SIZE, b"\0")
    source.seek(0, os.SEEK_SET)
    return base64.b64encode(sample).decode("ascii")


def calc_proof(
    source: BinaryIO,
    file_size: int,
    access_token: str,
    proof_offset: ProofOffsetFunc = zero_proof_offset,
) -> tuple[str, str]:
    """
    Compute the content hash and proof code for a seekable source.

    Returns:
        Tuple of (sha1, proof code). Both are empty strings when the source
        is not seekable, which makes the upload ineligible for dedup.
    """
    if not is_seekable(source):
        logger.debug("Source not seekable, skipping content proof")
        return "", ""

    sha1 = calc_sha1(source)
    proof_code = calc_proof_code(source, file_size, access_token, proof_offset)
    return sha1, proof_code
