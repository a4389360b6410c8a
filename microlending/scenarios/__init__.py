"""Scenarios exercising the engine end to end."""

from microlending.scenarios.collection_day import CollectionDayScenario

__all__ = ["CollectionDayScenario"]
