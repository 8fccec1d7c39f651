"""Custom exception hierarchy for simfleet."""


class SimfleetError(Exception):
    """Base for all simfleet errors."""


class ConfigurationError(SimfleetError):
    """A configuration value or override is unusable."""


class SinkClientError(SimfleetError):
    """The telemetry sink client could not be constructed."""


class PublishError(SimfleetError):
    """A single sample could not be written to the sink."""
