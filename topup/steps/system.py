"""System package managers."""

import logging
import os
import re
from pathlib import Path
from typing import Callable, Dict, List

from ..core.errors import StepError
from ..core.executor import Command
from ..core.steps import Category, CommandStep, Step, require

logger = logging.getLogger(__name__)


def apt() -> CommandStep:
    return _AptStep(
        "apt",
        "apt-get",
        args=["dist-upgrade"],
        platforms=["linux"],
        distros=["debian", "ubuntu"],
        yes_args=["-y"],
        cleanup=[["autoremove"], ["clean"]],
        sudo=True,
        interactive=True,
    )


class _AptStep(CommandStep):
    """``apt-get update`` has to run before the upgrade itself."""

    def commands(self, ctx) -> List[Command]:
        binary = require(ctx, self.binary)
        return [self.command(binary, "update")] + super().commands(ctx)


def dnf() -> CommandStep:
    return CommandStep(
        "dnf",
        "dnf",
        args=["upgrade"],
        platforms=["linux"],
        distros=["fedora", "rhel"],
        yes_args=["-y"],
        cleanup=[["autoremove"]],
        sudo=True,
        interactive=True,
    )


def brew() -> CommandStep:
    return _BrewStep(
        "brew",
        "brew",
        args=["upgrade"],
        platforms=["darwin", "linux"],
        cleanup=[["cleanup"]],
        interactive=True,
    )


class _BrewStep(CommandStep):
    def commands(self, ctx) -> List[Command]:
        binary = require(ctx, self.binary)
        return [self.command(binary, "update")] + super().commands(ctx)


def flatpak() -> CommandStep:
    return CommandStep(
        "flatpak",
        "flatpak",
        args=["update"],
        platforms=["linux"],
        yes_args=["-y"],
        cleanup=[["uninstall", "--unused"]],
        interactive=True,
    )


def snap() -> CommandStep:
    return CommandStep("snap", "snap", args=["refresh"], platforms=["linux"], sudo=True, interactive=True)


# Arch Linux ------------------------------------------------------------------

ARCH_MANAGERS = ("garuda-update", "paru", "yay", "trizen", "pikaur", "pamac", "pacman", "aura")
# Read from "arch.<key>_arguments"; aura takes separate AUR and repository lists
ARCH_ARGUMENT_KEYS = ("garuda_update", "paru", "yay", "trizen", "pikaur", "pamac", "aura_aur", "aura_pacman")
# Aura stopped needing sudo in this release
AURA_NO_SUDO = (4, 0, 6)
# yay/paru -Pw exits 1 when there is no unread news
NEWS_OK_CODES = frozenset({0, 1})


def _arch_path() -> Dict[str, str]:
    return {"PATH": "/usr/bin:" + os.environ.get("PATH", "")}


def _noconfirm(ctx, flag: str = "--noconfirm") -> List[str]:
    return [flag] if ctx.yes("arch") else []


def _helper_args(ctx, key: str) -> List[str]:
    """Arguments for the main upgrade: ``arch.<key>_arguments`` then ``arguments.arch``."""
    return list(ctx.opts.arch_arguments.get(key, [])) + ctx.extra_args("arch")


def _garuda(ctx, name: str, exe: Path, pacman: Path) -> List[Command]:
    env = dict(_arch_path(), UPDATE_AUR="1", SKIP_MIRRORLIST="1")
    if ctx.yes("arch"):
        env["PACMAN_NOCONFIRM"] = "1"
    return [Command.of(exe, *_helper_args(ctx, "garuda_update"), env=env)]


def _yay_paru(ctx, name: str, exe: Path, pacman: Path) -> List[Command]:
    commands = []
    if ctx.opts.arch_show_news:
        commands.append(Command.of(exe, "-Pw", ok_codes=NEWS_OK_CODES))
    commands.append(
        Command.of(exe, "--pacman", pacman, "-Syu", *_helper_args(ctx, name), *_noconfirm(ctx), env=_arch_path())
    )
    if ctx.cleanup:
        commands.append(Command.of(exe, "--pacman", pacman, "-Scc", *_noconfirm(ctx)))
    return commands


def _trizen_pikaur(ctx, name: str, exe: Path, pacman: Path) -> List[Command]:
    commands = [Command.of(exe, "-Syu", *_helper_args(ctx, name), *_noconfirm(ctx), env=_arch_path())]
    if ctx.cleanup:
        commands.append(Command.of(exe, "-Sc", *_noconfirm(ctx)))
    return commands


def _pamac(ctx, name: str, exe: Path, pacman: Path) -> List[Command]:
    no_confirm = _noconfirm(ctx, "--no-confirm")
    commands = [Command.of(exe, "upgrade", *_helper_args(ctx, "pamac"), *no_confirm, env=_arch_path())]
    if ctx.cleanup:
        commands.append(Command.of(exe, "clean", *no_confirm))
    return commands


def _pacman(ctx, name: str, exe: Path, pacman: Path) -> List[Command]:
    commands = [
        Command.of(exe, "-Syu", *ctx.extra_args("arch"), *_noconfirm(ctx), env=_arch_path(), sudo=True)
    ]
    if ctx.cleanup:
        commands.append(Command.of(exe, "-Scc", *_noconfirm(ctx), sudo=True))
    return commands


def _aura(ctx, name: str, exe: Path, pacman: Path) -> List[Command]:
    # "aura x.y.z"
    output = ctx.executor.output(exe, "--version").strip()
    version = _parse_version(output.replace("aura", "", 1).strip())
    if version is None:
        raise StepError(f"Unexpected output from aura --version: {output!r}")

    sudo = version < AURA_NO_SUDO
    aur = ctx.opts.arch_arguments.get("aura_aur", [])
    repo = ctx.opts.arch_arguments.get("aura_pacman", [])
    return [
        Command.of(exe, "-Au", *aur, *_noconfirm(ctx), sudo=sudo),
        Command.of(exe, "-Syu", *repo, *_noconfirm(ctx), sudo=sudo),
    ]


def _parse_version(text: str):
    match = re.match(r"(\d+)\.(\d+)\.(\d+)", text)
    if not match:
        return None
    return tuple(int(part) for part in match.groups())


_ARCH_BUILDERS: Dict[str, Callable] = {
    "garuda-update": _garuda,
    "paru": _yay_paru,
    "yay": _yay_paru,
    "trizen": _trizen_pikaur,
    "pikaur": _trizen_pikaur,
    "pamac": _pamac,
    "pacman": _pacman,
    "aura": _aura,
}


class ArchStep(Step):
    """Arch Linux: the first AUR helper found, falling back to pacman.

    The helper can be pinned with ``arch.package_manager``. After a
    successful upgrade any ``.pacnew``/``.pacsave`` files under ``/etc`` are
    listed so the user can merge them.
    """

    name = "arch"
    category = Category.SYSTEM

    def __init__(self, etc: Path = Path("/etc")):
        self.etc = etc

    def applicable(self, ctx) -> bool:
        return ctx.env.os_name == "linux" and ctx.env.which("pacman") is not None

    def resolve(self, ctx):
        """Return ``(manager name, executable)`` or ``None``."""
        choice = ctx.opts.arch_package_manager
        candidates = ARCH_MANAGERS if choice == "autodetect" else (choice,)
        for name in candidates:
            if name == "pacman":
                exe = ctx.env.which("powerpill") or ctx.env.which("pacman")
            else:
                exe = ctx.env.which(name)
            if exe is not None:
                return name, exe
        return None

    def commands(self, ctx) -> List[Command]:
        resolved = self.resolve(ctx)
        if resolved is None:
            raise StepError(f"Could not find the {ctx.opts.arch_package_manager} package manager")
        name, exe = resolved
        logger.debug("Using %s (%s) for Arch Linux", name, exe)
        pacman = ctx.env.which("powerpill") or Path("pacman")
        return _ARCH_BUILDERS[name](ctx, name, exe, pacman)

    def after(self, ctx) -> None:
        leftovers = pacnew_files(self.etc)
        if leftovers:
            ctx.reporter.warning("Pacman backup configuration files found:")
            for path in leftovers:
                ctx.reporter.print(str(path))


def pacnew_files(root: Path) -> List[Path]:
    """``.pacnew`` and ``.pacsave`` files below ``root``, unreadable dirs ignored."""
    found = []
    for dirpath, _dirnames, filenames in os.walk(root, onerror=lambda e: None):
        for filename in filenames:
            if filename.endswith((".pacnew", ".pacsave")):
                found.append(Path(dirpath) / filename)
    return sorted(found)


def system_steps() -> List[Step]:
    return [ArchStep(), apt(), dnf(), brew(), flatpak(), snap()]
