"""Intranet Platform - Backend.

The backend is a thin authentication gate in front of the intranet SPA:

- A fixed set of public paths (root, static bundle, metadata, login).
- Everything else requires a valid session.
- CORS is restricted to local / LAN origins so the SPA dev server can talk to the API.
"""

__all__ = ["__version__"]

__version__ = "0.1.0"
