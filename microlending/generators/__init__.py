"""Schedule and record generators."""

from microlending.generators.client import ClientGenerator, CollectorGenerator
from microlending.generators.schedule import ScheduleGenerator

__all__ = ["ClientGenerator", "CollectorGenerator", "ScheduleGenerator"]
