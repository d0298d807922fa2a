"""Exception hierarchy and warning records for environment resolution.

These types give the configuration engine a single error surface so the CLI
entry points can catch ``PlatformConfigError`` once and report the offending
field before anything is exported.

Examples
--------
>>> raise InvalidInput("region", "us-east-1", "unknown region")
Traceback (most recent call last):
...
coder_platform._platform_errors.InvalidInput: unknown region: region='us-east-1'
"""

from __future__ import annotations

from dataclasses import dataclass


class PlatformConfigError(Exception):
    """Base error for environment configuration helpers."""


class InvalidInput(PlatformConfigError):
    """Raised when a caller-supplied input is illegal.

    Parameters
    ----------
    field
        Name of the offending input field.
    value
        The rejected value, reported verbatim.
    reason
        Short description of the rule that was broken.

    Examples
    --------
    >>> error = InvalidInput("environment", "qa", "unknown environment")
    >>> error.field, error.value
    ('environment', 'qa')
    """

    def __init__(self, field: str, value: object, reason: str) -> None:
        self.field = field
        self.value = value
        self.reason = reason
        super().__init__(f"{reason}: {field}={value!r}")


class NameCollision(PlatformConfigError):
    """Raised when a derived identifier is already taken.

    The resolver has no view of provider state, so this is only raised when
    the caller hands in the identifiers it already knows about. A collision
    discovered while creating the resource belongs to the provisioning step.
    """

    def __init__(self, field: str, value: str) -> None:
        self.field = field
        self.value = value
        super().__init__(f"{field} {value!r} collides with an existing resource")


@dataclass(frozen=True, slots=True)
class UnknownTier:
    """A pricing lookup miss recorded during cost estimation.

    Attributes
    ----------
    category
        Pricing sub-table that was consulted (``compute`` or ``database``).
    tier
        Tier identifier that had no price.
    """

    category: str
    tier: str

    def __str__(self) -> str:
        return f"no {self.category} price for tier {self.tier!r}"
