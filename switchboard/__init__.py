"""Declarative datasource resolvers: unit calls and pipelines."""
