"""Infrastructure adapters for batch device operations.

These adapters implement the port interfaces defined in the domain layer,
connecting the application to the SurfSight API.
"""

from .surfsight_gateway import SurfsightDeviceGateway

__all__ = [
    "SurfsightDeviceGateway",
]
