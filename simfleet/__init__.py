"""simfleet — synthetic server telemetry. Fake fleet, plausible load."""

from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("simfleet")
except PackageNotFoundError:
    __version__ = "0.1.0"  # fallback for development
