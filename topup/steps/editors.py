"""Editor plugin managers: Emacs (and Doom Emacs), vim-plug, lazy.nvim."""

from pathlib import Path
from typing import List, Optional

from ..core.errors import StepError
from ..core.executor import Command
from ..core.steps import Category, Step, require

EMACS_UPGRADE = """\
(progn
  (require 'package)
  (package-initialize)
  (package-refresh-contents)
  (if (fboundp 'package-upgrade-all)
      (package-upgrade-all nil)
    (dolist (name (mapcar #'car package-alist))
      (let ((desc (cadr (assq name package-archive-contents))))
        (when desc
          (package-install desc))))))
"""


class EmacsStep(Step):
    """Upgrade Emacs packages in batch mode, running ``doom upgrade`` first for Doom."""

    name = "emacs"
    category = Category.EDITOR

    def directory(self, ctx) -> Optional[Path]:
        for candidate in (ctx.env.home / ".emacs.d", ctx.env.config_dir / "emacs"):
            if candidate.is_dir():
                return candidate
        return None

    def doom(self, ctx) -> Optional[Path]:
        directory = self.directory(ctx)
        if directory is None:
            return None
        doom = directory / "bin" / "doom"
        return doom if doom.exists() else None

    def applicable(self, ctx) -> bool:
        return ctx.env.which("emacs") is not None and self.directory(ctx) is not None

    def commands(self, ctx) -> List[Command]:
        emacs = require(ctx, "emacs")
        directory = self.directory(ctx)
        if directory is None:
            raise StepError("Emacs directory does not exist")

        commands = []
        doom = self.doom(ctx)
        if doom is not None:
            force = ["--force"] if ctx.yes(self.name) else []
            commands.append(Command.of(doom, *force, "upgrade"))

        init_file = directory / "init.el"
        if init_file.exists():
            commands.append(
                Command.of(emacs, "--batch", "--debug-init", "-l", init_file, "--eval", EMACS_UPGRADE, interactive=False)
            )
        elif doom is None:
            raise StepError(f"{init_file} does not exist")
        return commands

    def after(self, ctx) -> None:
        # Doom upgrades itself first; the batch run still needs init.el
        init_file = self.directory(ctx) / "init.el"
        if not init_file.exists():
            raise StepError(f"{init_file} does not exist")


class VimPlugStep(Step):
    """vim-plug in Vim: upgrade the plugin manager, then every plugin."""

    name = "vim"
    category = Category.EDITOR

    def plug(self, ctx) -> Path:
        return ctx.env.home / ".vim" / "autoload" / "plug.vim"

    def applicable(self, ctx) -> bool:
        return ctx.env.which("vim") is not None and self.plug(ctx).exists()

    def commands(self, ctx) -> List[Command]:
        vim = require(ctx, "vim")
        return [
            Command.of(vim, "-N", "-es", "-c", "PlugUpgrade", "-c", "PlugUpdate --sync", "-c", "qa!", interactive=False)
        ]


class LazyNvimStep(Step):
    """lazy.nvim in Neovim, synced headless."""

    name = "neovim"
    category = Category.EDITOR

    def lazy_dir(self, ctx) -> Path:
        return ctx.env.home / ".local" / "share" / "nvim" / "lazy" / "lazy.nvim"

    def applicable(self, ctx) -> bool:
        return ctx.env.which("nvim") is not None and self.lazy_dir(ctx).is_dir()

    def commands(self, ctx) -> List[Command]:
        nvim = require(ctx, "nvim")
        return [Command.of(nvim, "--headless", "+Lazy! sync", "+qa", interactive=False)]


def editor_steps() -> List[Step]:
    return [EmacsStep(), VimPlugStep(), LazyNvimStep()]
