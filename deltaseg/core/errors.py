"""Exception hierarchy for the deltaseg project.

DeltasegError is the root. All exceptions inherit from it so callers
can catch broad categories or specific types.
"""


class DeltasegError(Exception):
    """Root exception for the entire project."""


# --- Shared errors ---


class ConfigError(DeltasegError):
    """Configuration errors: invalid tolerance, unknown selector name."""


# --- Sequence operations ---


class SequenceError(DeltasegError):
    """Base for errors raised by delta, segment and apply operations."""


class MismatchError(SequenceError):
    """Sequence lengths differ, or a range could not be mapped between domains."""


class OutOfBoundsError(SequenceError):
    """Requested range falls outside the sequence's index domain."""


# --- Convergence loop ---


class ConvergenceError(DeltasegError):
    """Base for all convergence loop errors."""


class SelectionFailedError(ConvergenceError):
    """The selector declined to choose among a non-empty candidate set."""


class ConvergenceLimitError(ConvergenceError):
    """The loop applied more steps than its configured cap allows."""
