from __future__ import annotations

import pytest

from sprout.state import RUN_STATE


@pytest.fixture(autouse=True)
def reset_run_state():
    RUN_STATE.deactivate()
    yield
    RUN_STATE.deactivate()
