"""Upgrade topup itself, last."""

import os
from pathlib import Path
from typing import List

from ..core.executor import Command
from ..core.steps import Category, Step, require

DISTRIBUTION = "topup-cli"


class SelfUpdateStep(Step):
    """Only pipx installs are upgraded; other install methods are left alone."""

    name = "self_update"
    category = Category.SELF_UPDATE

    def venv(self, ctx) -> Path:
        pipx_home = os.environ.get("PIPX_HOME")
        root = Path(pipx_home) if pipx_home else ctx.env.home / ".local" / "pipx"
        return root / "venvs" / DISTRIBUTION

    def applicable(self, ctx) -> bool:
        return ctx.env.which("pipx") is not None and self.venv(ctx).is_dir()

    def commands(self, ctx) -> List[Command]:
        pipx = require(ctx, "pipx")
        return [Command.of(pipx, "upgrade", DISTRIBUTION, interactive=False)]
