"""
Service layer abstraction.

Each service encapsulates business logic for a domain and talks to the
database only through the entity store in ``store``.  API handlers call
services and translate their exceptions into HTTP responses.
"""
