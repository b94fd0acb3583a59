"""
Top-level package for the StyleDecor API.

All functionality lives in submodules under ``app``; importing
``styledecor_api.app.main`` gives access to the ASGI application.
"""

__all__ = []
