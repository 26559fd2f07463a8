"""
Exceptions raised by the event generator.
"""


class NuclearEventsError(Exception):
    """Base class for errors raised by nuclear_events."""


class ReactionError(NuclearEventsError):
    """Raised when a reaction cannot be evaluated or an event cannot be created."""


class InvalidTransitionError(NuclearEventsError, ValueError):
    """Raised for nuclear transitions that are forbidden or malformed."""


class MassTableError(NuclearEventsError, KeyError):
    """Raised when a requested mass is not available."""

    def __str__(self):
        # KeyError quotes its argument; keep the message readable.
        return str(self.args[0]) if self.args else ""


class GeneratorError(NuclearEventsError):
    """Raised when the generator is not configured well enough to sample."""


class DecayError(NuclearEventsError):
    """Raised when the de-excitation cascade has no open decay channel."""
