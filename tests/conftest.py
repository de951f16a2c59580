import pytest

from hookstate import _debounce


@pytest.fixture(autouse=True)
def _reset_scheduler():
    """Each test starts with an empty queue and the default scheduler."""
    _debounce.reset()
    yield
    _debounce.reset()
