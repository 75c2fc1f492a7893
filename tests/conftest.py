"""Pytest fixtures for Pointsman tests."""

import pytest

from pointsman.adapters.session import DjangoSessionProvider
from pointsman.models import Member, Reward
from pointsman.services.cache import PersistedCache
from pointsman.services.connectivity import ConnectivityContext


@pytest.fixture
def member(db):
    """Member with 100 points."""
    return Member.objects.create(
        code="MEM-001",
        full_name="Ada Okafor",
        email="ada@example.com",
        points=100,
        lifetime_points=100,
    )


@pytest.fixture
def poor_member(db):
    """Member with 50 points."""
    return Member.objects.create(code="MEM-002", full_name="Ben Mensah", points=50)


@pytest.fixture
def reward(db):
    """60-point reward with a single slot."""
    return Reward.objects.create(
        code="TSHIRT",
        title="Campaign T-shirt",
        icon="👕",
        reward_type="merchandise",
        points_cost=60,
        max_redemptions=1,
    )


@pytest.fixture
def expensive_reward(db):
    return Reward.objects.create(code="HOODIE", title="Hoodie", points_cost=80)


@pytest.fixture
def sticker(db):
    """Cheap reward with unlimited inventory."""
    return Reward.objects.create(code="STICKER", title="Sticker pack", points_cost=10)


@pytest.fixture
def cache():
    """Empty device cache."""
    c = PersistedCache()
    c.clear_all()
    yield c
    c.clear_all()


@pytest.fixture
def connectivity():
    return ConnectivityContext(is_connected=True, connection_type="wifi")


@pytest.fixture
def session(member):
    provider = DjangoSessionProvider({})
    provider.sign_in(member.code)
    return provider
