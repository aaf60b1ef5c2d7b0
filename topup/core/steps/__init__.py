"""Step abstraction shared by every tool-specific updater."""

from .base import Category, CommandStep, Step, require

__all__ = ["Category", "CommandStep", "Step", "require"]
