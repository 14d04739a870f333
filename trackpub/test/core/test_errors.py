from __future__ import annotations

from trackpub.core.errors import ErrorCode


def test_ok_is_success() -> None:
    assert ErrorCode.OK.is_success
    assert not ErrorCode.PUBLISH_ERROR.is_success


def test_codes_are_stable() -> None:
    assert int(ErrorCode.USER_ERROR) == 1
    assert int(ErrorCode.ENV_ERROR) == 2
    assert int(ErrorCode.PUBLISH_ERROR) == 3
    assert int(ErrorCode.NETWORK_ERROR) == 4
    assert int(ErrorCode.IO_ERROR) == 5
