"""GraphQL API for running ANALYZE on catalog-checked PostgreSQL tables."""

__version__ = "0.1.0"
