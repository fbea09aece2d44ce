"""autonix-cli: Command line interface for the Autonix console engine."""

from __future__ import annotations

__version__ = "0.1.0"
