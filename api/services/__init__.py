"""
API Services Layer.

Direct database operations for API endpoints, kept separate from the
advisory AI agents. Every function opens its own session from
``AsyncSessionLocal``.
"""
