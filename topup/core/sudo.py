"""Privilege elevation: locating sudo-like programs and caching the credential.

The credential lives in a ``SudoCell`` owned by the execution context. It is
acquired lazily by the first step that needs it and reused by every later
step, so the user is asked for a password at most once per run.
"""

import logging
import subprocess
import threading
from pathlib import Path
from typing import Callable, List, Optional

from .errors import ElevationError

logger = logging.getLogger(__name__)

# Tried in order
SUDO_PROGRAMS = ("sudo", "doas", "please", "run0")


class Sudo:
    """A resolved elevation program, or none when already running as root."""

    def __init__(self, path: Optional[Path], kind: str):
        self.path = path
        self.kind = kind

    @classmethod
    def root(cls) -> "Sudo":
        return cls(None, "root")

    def prefix(self, argv: List[str]) -> List[str]:
        if self.path is None:
            return list(argv)
        return [str(self.path)] + list(argv)

    def __repr__(self) -> str:
        return f"Sudo({self.kind!r}, {self.path!r})"


def find_sudo(env) -> Optional[Sudo]:
    """Return the first elevation program found on PATH."""
    for name in SUDO_PROGRAMS:
        path = env.which(name)
        if path:
            return Sudo(path, name)
    return None


def acquire_sudo(env, dry_run: bool = False) -> Sudo:
    """Find an elevation program and validate the user's credentials.

    ``sudo -v`` is run once with the terminal inherited so the password
    prompt reaches the user. In dry-run mode nothing is executed.
    """
    if env.is_root:
        return Sudo.root()

    sudo = find_sudo(env)
    if sudo is None:
        raise ElevationError(
            "sudo is required but none of " + ", ".join(SUDO_PROGRAMS) + " was found"
        )
    if dry_run or sudo.kind != "sudo":
        return sudo

    logger.debug("Validating sudo credentials with %s -v", sudo.path)
    try:
        result = subprocess.run([str(sudo.path), "-v"])
    except OSError as e:
        raise ElevationError(f"Could not run {sudo.path}: {e}") from e
    if result.returncode != 0:
        raise ElevationError(f"{sudo.kind} -v failed with exit status {result.returncode}")
    return sudo


class SudoCell:
    """Lazy, initialise-once holder for the elevation credential.

    A failed acquisition is cached as well: later callers get the same
    ``ElevationError`` instead of a second prompt.
    """

    def __init__(self, acquire: Callable[[], Sudo]):
        self._acquire = acquire
        self._lock = threading.Lock()
        self._done = False
        self._value: Optional[Sudo] = None
        self._error: Optional[ElevationError] = None

    @property
    def acquired(self) -> bool:
        return self._done

    def get(self) -> Sudo:
        with self._lock:
            if not self._done:
                try:
                    self._value = self._acquire()
                except ElevationError as e:
                    logger.warning("Elevation failed: %s", e)
                    self._error = e
                self._done = True

        if self._error is not None:
            raise self._error
        return self._value
