"""Graph metrics engine: centralities, components, clusters and aggregates."""

__version__ = "0.1.0"
