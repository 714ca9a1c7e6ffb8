"""Pydantic Schemas — request/response validation for API endpoints.

Invariants:
    - Schemas validate at system boundary (user input, API responses)
    - Conversion to/from the User entity lives on the schema, not in routes
"""
