import pytest

from aliyun_drive.config import MAX_PART_SIZE, AliyunDriveConfig
from aliyun_drive.crypto.proof import zero_proof_offset


def test_defaults() -> None:
    config = AliyunDriveConfig(refresh_token="refresh-abc")

    assert not config.is_album
    assert config.page_size == 200
    assert config.max_part_size == MAX_PART_SIZE == 1024**3
    assert config.proof_offset is zero_proof_offset


def test_repr_hides_refresh_token() -> None:
    assert "refresh-abc" not in repr(AliyunDriveConfig(refresh_token="refresh-abc"))


@pytest.mark.parametrize(
    "overrides",
    [
        {"refresh_token": ""},
        {"timeout": 0},
        {"transfer_timeout": -1},
        {"page_size": 0},
        {"max_part_size": 0},
        {"chunk_size": 0},
    ],
)
def test_invalid_values_are_rejected(overrides: dict) -> None:
    with pytest.raises(ValueError):
        AliyunDriveConfig(**{"refresh_token": "refresh-abc", **overrides})
