"""Language toolchains and their package managers."""

import os
from pathlib import Path
from typing import List

from ..core.errors import StepError
from ..core.executor import Command
from ..core.steps import Category, CommandStep, Step, require


class ToolchainStep(CommandStep):
    category = Category.LANGUAGE


class NpmStep(Step):
    """Global npm packages, through sudo when the global prefix is not ours."""

    name = "npm"
    category = Category.LANGUAGE

    def applicable(self, ctx) -> bool:
        return ctx.env.which("npm") is not None

    def commands(self, ctx) -> List[Command]:
        npm = require(ctx, "npm")
        prefix = Path(ctx.executor.output(npm, "prefix", "-g").strip())
        if not prefix.parts:
            raise StepError("npm prefix -g returned nothing")
        needs_sudo = not os.access(prefix / "lib", os.W_OK) and not ctx.env.is_root
        return [
            Command.of(npm, "update", "-g", *ctx.extra_args(self.name), sudo=needs_sudo, interactive=False)
        ]


def toolchain_steps() -> List[Step]:
    return [
        ToolchainStep("rustup", "rustup", args=["update"]),
        ToolchainStep("cargo", "cargo", args=["install-update", "--git", "--all"], requires=["cargo-install-update"]),
        NpmStep(),
        ToolchainStep("pipx", "pipx", args=["upgrade-all"]),
        ToolchainStep("gem", "gem", args=["update"], cleanup=[["cleanup"]]),
    ]
