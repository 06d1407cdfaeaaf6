from __future__ import annotations

import retryloop


def test_version() -> None:
    assert isinstance(retryloop.__version__, str)


def test_all_exported() -> None:
    for name in retryloop.__all__:
        assert hasattr(retryloop, name), name
