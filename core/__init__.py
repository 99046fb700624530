"""Core services for Site Companion.

This package contains the shared service container, the translation cache and resolver,
the language context and the player-count monitor.
"""

from core.shared_data import SharedData

__all__: list[str] = ["SharedData"]
