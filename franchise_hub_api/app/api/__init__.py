"""HTTP API package.  Versions live in subpackages (``v1``)."""
