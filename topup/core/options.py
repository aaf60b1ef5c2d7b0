"""Options dataclasses for run configuration."""

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, List, Optional


@dataclass(frozen=True)
class RunOptions:
    """Resolved options for one ``topup run`` (config merged with CLI flags)."""

    # Behavior flags
    dry_run: bool = False
    yes_all: bool = False
    yes_steps: FrozenSet[str] = frozenset()
    cleanup: bool = False
    show_skipped: bool = False
    pre_sudo: bool = False

    # Step selection
    skip: FrozenSet[str] = frozenset()
    only: FrozenSet[str] = frozenset()

    # Per-command timeout in seconds, None waits forever
    timeout: Optional[int] = None

    # Step-specific settings
    arguments: Dict[str, List[str]] = field(default_factory=dict)
    arch_package_manager: str = "autodetect"
    # Per-helper arguments, keyed like "yay" or "aura_aur"
    arch_arguments: Dict[str, List[str]] = field(default_factory=dict)
    arch_show_news: bool = False

    def yes(self, step: str) -> bool:
        """Whether confirmations are pre-answered for ``step``."""
        return self.yes_all or step in self.yes_steps

    def is_ignored(self, step: str) -> bool:
        """Whether configuration excludes ``step`` before any attempt."""
        if step in self.skip:
            return True
        return bool(self.only) and step not in self.only

    def extra_args(self, step: str) -> List[str]:
        return list(self.arguments.get(step, []))
