"""
Error types raised by the supervisor core and its collaborators.

Planning failures are not errors; see planning.PlanStatus.
"""


class SupervisorError(Exception):
    """Base class for supervisor errors."""


class MalformedInput(SupervisorError, ValueError):
    """Sensor data does not fit the sensor schema. Nothing was stored."""


class InvalidArgument(SupervisorError, ValueError):
    """A caller passed missing or ill-shaped data where data is required."""


class TransportError(SupervisorError):
    """The link to the robot failed to deliver or accept data."""
