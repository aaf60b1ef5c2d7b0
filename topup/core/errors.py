"""Exception hierarchy for the step engine.

``StepError`` and its subclasses are expected, per-step problems: they are
caught at the step boundary and turned into a failed outcome. ``FatalError``
subclasses abort the whole run.
"""


class TopupError(Exception):
    """Base class for all topup errors."""


class StepError(TopupError):
    """A single step could not complete."""


class MissingBinaryError(StepError):
    """A binary the step needs is not on the search path."""

    def __init__(self, binary: str):
        super().__init__(f"Cannot find {binary} in PATH")
        self.binary = binary


class ElevationError(StepError):
    """Elevated privileges were required but could not be obtained."""


class FatalError(TopupError):
    """Abort the remaining queue."""


class PromptUnavailableError(FatalError):
    """The controlling terminal cannot be read for a confirmation."""


class RegistryError(FatalError):
    """The step table is malformed."""


class ConfigError(FatalError):
    """The configuration file contains an invalid value."""


class UserAbort(FatalError):
    """The user chose to quit at a prompt."""


class Interrupted(FatalError):
    """The process received a termination signal."""


class ReportClosedError(TopupError):
    """An entry was recorded after the run finished."""
