import os

import pytest


def pytest_collection_modifyitems(config: pytest.Config, items: list) -> None:
    if os.getenv("ALIYUN_DRIVE_REFRESH_TOKEN"):
        return
    mark_expr = getattr(config.option, "markexpr", "")
    if "integration" in mark_expr:
        return
    skip = pytest.mark.skip(reason="ALIYUN_DRIVE_REFRESH_TOKEN not set")
    for item in items:
        if item.get_closest_marker("integration"):
            item.add_marker(skip)


@pytest.fixture(scope="session")
def refresh_token() -> str:
    token = os.getenv("ALIYUN_DRIVE_REFRESH_TOKEN")
    if not token:
        pytest.fail("ALIYUN_DRIVE_REFRESH_TOKEN must be set to run integration tests.")
    return token
