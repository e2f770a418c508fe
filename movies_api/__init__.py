"""
Top‑level package for the Movies API.

This file makes ``movies_api`` a Python package so that modules
within ``app`` can be imported using fully qualified names like
``movies_api.app.main``.

The package provides no public exports; all functionality lives in
submodules under ``app``.
"""

__all__ = []
