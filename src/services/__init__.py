"""Query, classification and dashboard services.

Handlers import these on first use so that a cold start of the health route
never builds a database engine.
"""
