import random
from datetime import datetime

import pytest

from ship_route.config import Settings
from ship_route.core.session import NavigationSession
from ship_route.providers.direct import DirectRouteProvider

FIXED_NOW = datetime(2026, 1, 22, 8, 0)


@pytest.fixture
def session():
    return NavigationSession(
        provider=DirectRouteProvider(n_points=5),
        cfg=Settings(),
        rng=random.Random(7),
        clock=lambda: FIXED_NOW,
    )
