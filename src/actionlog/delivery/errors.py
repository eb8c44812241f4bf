"""
Module: errors.py
Description: Exceptions raised inside a single delivery attempt.

None of these escape the public DeliveryQueue operations; the retry
policy treats each one as an ordinary failed attempt.
"""


class DeliveryError(Exception):
    """A delivery attempt did not reach a collector with a 2xx response."""


class FallbackDeliveryError(DeliveryError):
    """The fallback collector rejected the entry or could not be reached."""


class FallbackNotConfiguredError(DeliveryError):
    """A fallback delivery was requested but no fallback endpoint is set."""
