"""API route handlers."""

from api.routes import distributions, health, tree, verify

__all__ = ["distributions", "health", "tree", "verify"]
