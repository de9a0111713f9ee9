"""
Core infrastructure: configuration, logging, storage, broadcast and the
data store shared by all services.
"""
