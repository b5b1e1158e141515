"""
Aliyun Drive client configuration.
"""

from dataclasses import dataclass, field

from aliyun_drive.crypto.proof import ProofOffsetFunc, zero_proof_offset

MAX_PART_SIZE = 1024 * 1024 * 1024  # 1 GiB

FAKE_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/91.0.4472.77 Safari/537.36"
)


@dataclass(frozen=True, kw_only=True)
class AliyunDriveConfig:
    """
    Attributes:
        refresh_token: Long-lived credential exchanged for access tokens.
        is_album: Operate on the album drive instead of the default drive.
        api_url: Base URL for file and user endpoints.
        auth_url: Base URL for the token endpoint.
        referer: Referer header sent with every request.
        user_agent: User-Agent header sent with every request.
        timeout: Request timeout in seconds for JSON API calls.
        transfer_timeout: Timeout in seconds for part uploads and downloads.
        page_size: Number of children requested per listing page.
        max_part_size: Upper bound in bytes for a single upload part.
        chunk_size: Chunk size in bytes used when streaming content.
        proof_offset: Maps (access token, file size) to the proof sample offset.
    """

    refresh_token: str = field(repr=False)
    is_album: bool = False
    api_url: str = "https://api.aliyundrive.com"
    auth_url: str = "https://auth.aliyundrive.com"
    referer: str = "https://www.aliyundrive.com/"
    user_agent: str = FAKE_USER_AGENT
    timeout: float = 30.0
    transfer_timeout: float = 600.0
    page_size: int = 200
    max_part_size: int = MAX_PART_SIZE
    chunk_size: int = 64 * 1024
    proof_offset: ProofOffsetFunc = field(default=zero_proof_offset, repr=False)

    def __post_init__(self) -> None:
        if not self.refresh_token:
            msg = "refresh_token must not be empty"
            raise ValueError(msg)
        if self.timeout <= 0:
            msg = "timeout must be positive"
            raise ValueError(msg)
        if self.transfer_timeout <= 0:
            msg = "transfer_timeout must be positive"
            raise ValueError(msg)
        if self.page_size <= 0:
            msg = "page_size must be positive"
            raise ValueError(msg)
        if self.max_part_size <= 0:
            msg = "max_part_size must be positive"
            raise ValueError(msg)
        if self.chunk_size <= 0:
            msg = "chunk_size must be positive"
            raise ValueError(msg)
