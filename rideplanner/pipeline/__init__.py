"""Preference aggregation and route synthesis."""

from .aggregator import aggregate, parse_preference, parse_preferences
from .synthesizer import RouteSynthesizer

__all__ = ["aggregate", "parse_preference", "parse_preferences", "RouteSynthesizer"]
