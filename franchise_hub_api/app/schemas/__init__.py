"""
Pydantic schema definitions for stored records and API payloads.

Each domain (franchises, applications, payments, etc.) defines its own
models.  Stored records are validated with the same models when the
store loads them back from storage.
"""
