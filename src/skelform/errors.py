"""
Errors

Exception types raised by the runtime.

Data-integrity problems are detected while loading and reported as
:class:`DataIntegrityError`. Misuse of the per-frame API (mismatched
parallel lists, unknown animations) raises :class:`ContractViolationError`
before any bone is modified.
"""


class SkelformError(Exception):
    """Base class for all runtime errors."""


class DataIntegrityError(SkelformError, ValueError):
    """Armature or animation data violates a structural invariant."""


class ContractViolationError(SkelformError, ValueError):
    """A caller passed arguments that break an operation's contract."""
