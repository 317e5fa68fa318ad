import pytest


@pytest.fixture(scope="session")
def _identity_domain():
    from identity.domain import identity

    identity.init()
    return identity


@pytest.fixture(autouse=True)
def run_around_tests(_identity_domain):
    """Push domain context before each test, cleanup after."""
    ctx = _identity_domain.domain_context()
    ctx.push()

    yield

    from protean import current_domain

    for _, provider in current_domain.providers.items():
        provider._data_reset()

    for _, broker in current_domain.brokers.items():
        broker._data_reset()

    current_domain.event_store.store._data_reset()
    ctx.pop()


@pytest.fixture()
def seeded_roles():
    """Role records for every ranked role name."""
    from identity.role.seeding import SeedRoles
    from protean import current_domain

    return current_domain.process(SeedRoles(actor_id="system"), asynchronous=False)
