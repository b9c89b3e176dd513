"""Logging, delivery metrics and the ASGI integration.

Logging goes through structlog (JSON lines, contextvars); metrics are an
in-memory snapshot of item delivery outcomes.
"""
