"""Shelf display framework for character-grid monitors.

A cooperative, asyncio-driven view system featuring:
- Capability-probing cache shared by all views
- Per-surface view lifecycle with lazy provider acquisition
- Change tracking against a rolling baseline
- Grid, list and paginated layouts with touch zones
"""

__version__ = "1.0.0"
