"""
Domain layer for the order import service.

This layer contains business entities, value objects, and domain logic
following Domain-Driven Design principles. It is independent of
persistence and infrastructure concerns.
"""
