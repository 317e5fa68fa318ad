"""Schema management for domains persisted in a relational database.

Memory-backed providers (the default for tests) are skipped, so both helpers
are safe to call in every environment.
"""

from protean.domain import Domain
from sqlalchemy import create_engine

_RDBMS_PROVIDERS = ("sqlite", "postgresql")


def _sql_providers(domain: Domain):
    for _, provider in domain.providers.items():
        if provider.conn_info["provider"] in _RDBMS_PROVIDERS:
            yield provider


def _register_models(domain: Domain, provider) -> None:
    """Touch each repository's DAO so its table lands in the provider's metadata."""
    registries = (
        domain.registry.aggregates,
        domain.registry.entities,
        domain.registry.projections,
    )
    for registry in registries:
        for _, record in registry.items():
            if record.cls.meta_.provider == provider.name:
                domain.repository_for(record.cls)._dao  # noqa: B018


def setup_db(domain: Domain) -> None:
    """Create the tables of every aggregate, entity and projection in ``domain``."""
    with domain.domain_context():
        for provider in _sql_providers(domain):
            _register_models(domain, provider)
            provider._metadata.create_all(create_engine(provider.conn_info["database_uri"]))


def drop_db(domain: Domain) -> None:
    with domain.domain_context():
        for provider in _sql_providers(domain):
            provider._metadata.drop_all(create_engine(provider.conn_info["database_uri"]))
