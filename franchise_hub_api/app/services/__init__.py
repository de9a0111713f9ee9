"""
Business logic layer.

Each service is a class of async classmethods operating on the shared
data store.  Services raise ``LookupError`` for missing records,
``ValueError`` for invalid requests and ``PermissionError`` when the
acting user may not touch a record.
"""
