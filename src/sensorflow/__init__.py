"""sensorflow: event-driven sensor file processing pipeline."""

__version__ = "0.1.0"
