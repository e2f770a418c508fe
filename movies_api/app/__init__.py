"""
Application package initializer.

The application follows a ports‑and‑adapters layout.  HTTP routes in
``api`` drive the ``MovieService`` (``services``), which talks to the
data layer only through the ``MovieRepository`` port.  The SQLite
implementation of that port lives in ``adapters`` and the best‑effort
Kafka publisher in ``events``.
"""

from .main import app  # noqa: F401
