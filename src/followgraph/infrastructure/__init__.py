"""Infrastructure layer — store engine, schema, gateway, and queries.

This layer depends on stdlib and third-party libs (SQLAlchemy).
It must never import from domain, services, commands, or output.
The service layer bridges between domain models and infrastructure.
"""
