"""Global test configuration — runs before any test module imports."""
import os

import pytest

# Settings built from the environment must not pick up a developer's scorer
for _var in [v for v in os.environ if v.startswith("SCORER_")]:
    del os.environ[_var]

API_URL = "https://scorer.test/ceramic-cache"


@pytest.fixture
def settings():
    from stampscore.config import ScorerSettings
    return ScorerSettings(api_url=API_URL)


@pytest.fixture
def sleeps():
    """Records requested sleep durations instead of sleeping."""
    recorded = []

    async def fake_sleep(seconds):
        recorded.append(seconds)

    fake_sleep.recorded = recorded
    return fake_sleep
