"""Every step topup knows about, in registration order.

The registry sorts them by category; within a category this order is kept.
"""

from typing import List

from ..core.steps import Step
from .dotfiles import DotfilesStep, dotfiles_steps
from .editors import EmacsStep, LazyNvimStep, VimPlugStep, editor_steps
from .self_update import SelfUpdateStep
from .system import ArchStep, system_steps
from .toolchains import NpmStep, ToolchainStep, toolchain_steps


def default_steps() -> List[Step]:
    return system_steps() + toolchain_steps() + editor_steps() + dotfiles_steps() + [SelfUpdateStep()]


__all__ = [
    "default_steps",
    "ArchStep",
    "DotfilesStep",
    "EmacsStep",
    "LazyNvimStep",
    "NpmStep",
    "SelfUpdateStep",
    "ToolchainStep",
    "VimPlugStep",
]
