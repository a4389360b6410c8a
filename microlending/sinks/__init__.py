"""Output sinks for exporting engine records."""

from microlending.sinks.json_file import JsonFileSink
from microlending.sinks.kafka import KafkaSink

__all__ = ["JsonFileSink", "KafkaSink"]
