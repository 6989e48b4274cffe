"""AURA Coaching API: CRUD backend for the coaching admin tool."""

__version__ = "0.4.0"
