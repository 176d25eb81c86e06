"""gqlflow: schema registry and query pipeline for GraphQL-style APIs."""

__version__ = "0.1.0"
