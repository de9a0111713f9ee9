"""
Top-level package for the Franchise Hub API.

This file makes ``franchise_hub_api`` a Python package so that modules
within ``app`` can be imported using fully qualified names like
``franchise_hub_api.app.main``.

The package provides no public exports; all functionality lives in
submodules under ``app``.
"""

__all__ = []
