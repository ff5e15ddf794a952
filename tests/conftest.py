import pytest

import lvsctl.executor as executor_mod


@pytest.fixture(autouse=True)
def _restore_backend():
    """Put back whatever executor was active before each test."""
    previous = executor_mod.get_backend()
    yield
    executor_mod.set_backend(previous)
