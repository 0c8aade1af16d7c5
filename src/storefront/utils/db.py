"""Schema helpers for relational providers.

The in-memory provider needs no schema; SQLite and PostgreSQL providers get
their tables created from the DAOs Protean builds for each aggregate and entity.
"""

from protean.domain import Domain
from sqlalchemy import create_engine

RELATIONAL_PROVIDERS = ("sqlite", "postgresql")


def _relational_providers(domain: Domain):
    for name, provider in domain.providers.items():
        if provider.conn_info["provider"] in RELATIONAL_PROVIDERS:
            yield name, provider


def setup_db(domain: Domain) -> list[str]:
    """Create tables for every aggregate and entity; return the provider names touched."""
    touched = []
    with domain.domain_context():
        for name, provider in _relational_providers(domain):
            engine = create_engine(provider.conn_info["database_uri"])

            records = list(domain.registry.aggregates.values()) + list(domain.registry.entities.values())
            for record in records:
                if record.cls.meta_.provider == name:
                    # Building the DAO registers the table on the provider's metadata
                    domain.repository_for(record.cls)._dao  # noqa: B018

            provider._metadata.create_all(engine)
            touched.append(name)
    return touched


def drop_db(domain: Domain) -> list[str]:
    """Drop all tables known to relational providers; return the provider names touched."""
    touched = []
    with domain.domain_context():
        for name, provider in _relational_providers(domain):
            engine = create_engine(provider.conn_info["database_uri"])
            provider._metadata.drop_all(engine)
            touched.append(name)
    return touched
