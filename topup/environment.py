"""Host environment probing used while building the step registry."""

import os
import platform
import shutil
from pathlib import Path
from typing import Dict, Optional


class Environment:
    """Answers "is binary X resolvable" and "what OS is this".

    Results of ``which`` are memoised for the lifetime of the instance, which
    is one run.
    """

    def __init__(self, home: Optional[Path] = None, os_release: Path = Path("/etc/os-release")):
        self.home = home or Path.home()
        self._os_release = os_release
        self._which_cache: Dict[str, Optional[Path]] = {}
        self._distro: Optional[str] = None

    def which(self, binary: str) -> Optional[Path]:
        """Resolve ``binary`` on PATH."""
        if binary not in self._which_cache:
            found = shutil.which(binary)
            self._which_cache[binary] = Path(found) if found else None
        return self._which_cache[binary]

    @property
    def os_name(self) -> str:
        """``linux``, ``darwin``, ``windows``, ..."""
        return platform.system().lower()

    @property
    def config_dir(self) -> Path:
        xdg = os.environ.get("XDG_CONFIG_HOME")
        return Path(xdg) if xdg else self.home / ".config"

    @property
    def is_root(self) -> bool:
        geteuid = getattr(os, "geteuid", None)
        return geteuid is not None and geteuid() == 0

    def distro_id(self) -> str:
        """ID (and ID_LIKE) from os-release, e.g. ``"ubuntu debian"``."""
        if self._distro is None:
            self._distro = _read_distro(self._os_release)
        return self._distro

    def is_distro(self, *names: str) -> bool:
        ids = self.distro_id().split()
        return any(name in ids for name in names)


def _read_distro(path: Path) -> str:
    try:
        text = path.read_text()
    except OSError:
        return ""
    values = {}
    for line in text.splitlines():
        key, sep, value = line.partition("=")
        if sep:
            values[key.strip()] = value.strip().strip('"').strip("'")
    return " ".join(filter(None, [values.get("ID", ""), values.get("ID_LIKE", "")])).lower()
