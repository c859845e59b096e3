"""Job board service: skill matching, recommendations and real-time notifications."""

__version__ = "0.1.0"
