"""Dotfile managers."""

from typing import List

from ..core.steps import Category, CommandStep, Step


class DotfilesStep(CommandStep):
    category = Category.DOTFILES


def dotfiles_steps() -> List[Step]:
    return [
        DotfilesStep("chezmoi", "chezmoi", args=["update"]),
        DotfilesStep("yadm", "yadm", args=["pull"]),
    ]
