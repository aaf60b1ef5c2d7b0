"""Configuration file management and merging with CLI flags."""

import configparser
import shlex
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

from .core.errors import ConfigError
from .core.options import RunOptions
from .steps.system import ARCH_ARGUMENT_KEYS, ARCH_MANAGERS

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


class ConfigManager:
    """INI configuration stored at ``~/.topup/config.ini``.

    Keys are addressed as ``section.key``. The directory is created on first
    use; a missing file reads as empty.
    """

    def __init__(self, path: Optional[Path] = None):
        if path is None:
            self.config_dir = Path.home() / ".topup"
            self.config_file = self.config_dir / "config.ini"
        else:
            self.config_file = Path(path).expanduser()
            self.config_dir = self.config_file.parent
        self.config_dir.mkdir(parents=True, exist_ok=True)
        # Values are shell arguments, "%" must stay literal
        self._config = configparser.ConfigParser(interpolation=None)
        self._load()

    def _load(self) -> None:
        if not self.config_file.exists():
            return
        try:
            self._config.read(self.config_file)
        except configparser.Error as e:
            raise ConfigError(f"Cannot parse {self.config_file}: {e}") from e

    def _save(self) -> None:
        with open(self.config_file, "w") as f:
            self._config.write(f)

    def get_config_path(self) -> Path:
        return self.config_file

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        """Get a value by ``section.key``."""
        section, option = _split_key(key)
        return self._config.get(section, option, fallback=default)

    def set(self, key: str, value: str) -> None:
        """Set ``section.key`` and write the file."""
        section, option = _split_key(key)
        if not self._config.has_section(section):
            self._config.add_section(section)
        self._config.set(section, option, str(value))
        self._save()

    def unset(self, key: str) -> bool:
        """Remove ``section.key``. Returns False if it was not set."""
        section, option = _split_key(key)
        if not self._config.has_option(section, option):
            return False
        self._config.remove_option(section, option)
        if not self._config.options(section):
            self._config.remove_section(section)
        self._save()
        return True

    def section(self, name: str) -> Dict[str, str]:
        if not self._config.has_section(name):
            return {}
        return dict(self._config.items(name))

    def items(self) -> List[Tuple[str, str]]:
        """All settings as ``(section.key, value)`` pairs."""
        pairs = []
        for section in self._config.sections():
            for option, value in self._config.items(section):
                pairs.append((f"{section}.{option}", value))
        return pairs


def _split_key(key: str) -> Tuple[str, str]:
    section, sep, option = key.partition(".")
    if not sep or not section or not option:
        raise ConfigError(f"Config keys look like 'section.key', got {key!r}")
    return section.lower(), option.lower()


def parse_bool(value: str, key: str) -> bool:
    text = value.strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ConfigError(f"{key} must be true or false, got {value!r}")


def parse_names(value: Optional[str]) -> frozenset:
    if not value:
        return frozenset()
    return frozenset(part.lower() for part in value.replace(",", " ").split())


def load_run_options(
    config: ConfigManager,
    *,
    dry_run: bool = False,
    yes: bool = False,
    yes_for: Iterable[str] = (),
    skip: Iterable[str] = (),
    only: Iterable[str] = (),
    cleanup: bool = False,
    show_skipped: bool = False,
    pre_sudo: bool = False,
    timeout: Optional[int] = None,
) -> RunOptions:
    """Merge the configuration file with CLI flags into ``RunOptions``.

    Flags can only switch behavior on; they never turn off something the
    file enabled. Skip lists are unioned, an ``--only`` list replaces the
    file's.

    Raises:
        ConfigError: a setting has an invalid value
    """
    yes_all = yes
    yes_steps = frozenset(n.lower() for n in yes_for)
    raw_yes = config.get("misc.yes")
    if raw_yes is not None:
        if raw_yes.strip().lower() in _TRUE | _FALSE:
            yes_all = yes_all or parse_bool(raw_yes, "misc.yes")
        else:
            yes_steps |= parse_names(raw_yes)

    flags = {}
    for name, given in (("cleanup", cleanup), ("show_skipped", show_skipped), ("pre_sudo", pre_sudo)):
        raw = config.get(f"misc.{name}")
        flags[name] = given or (raw is not None and parse_bool(raw, f"misc.{name}"))

    if timeout is None:
        raw_timeout = config.get("misc.timeout")
        if raw_timeout:
            try:
                timeout = int(raw_timeout)
            except ValueError:
                raise ConfigError(f"misc.timeout must be a number of seconds, got {raw_timeout!r}")
    if timeout is not None and timeout <= 0:
        raise ConfigError(f"timeout must be positive, got {timeout}")

    only_names = frozenset(n.lower() for n in only) or parse_names(config.get("steps.only"))
    skip_names = frozenset(n.lower() for n in skip) | parse_names(config.get("steps.skip"))

    arch = config.get("arch.package_manager", "autodetect").strip().lower()
    if arch != "autodetect" and arch not in ARCH_MANAGERS:
        raise ConfigError(
            f"arch.package_manager must be autodetect or one of {', '.join(ARCH_MANAGERS)}, got {arch!r}"
        )

    arguments = {}
    for step, value in config.section("arguments").items():
        try:
            arguments[step] = shlex.split(value)
        except ValueError as e:
            raise ConfigError(f"arguments.{step}: {e}") from e

    arch_arguments = {}
    for key in ARCH_ARGUMENT_KEYS:
        value = config.get(f"arch.{key}_arguments")
        if not value:
            continue
        try:
            arch_arguments[key] = shlex.split(value)
        except ValueError as e:
            raise ConfigError(f"arch.{key}_arguments: {e}") from e
    raw_news = config.get("arch.show_news")
    show_news = raw_news is not None and parse_bool(raw_news, "arch.show_news")

    return RunOptions(
        dry_run=dry_run,
        yes_all=yes_all,
        yes_steps=yes_steps,
        cleanup=flags["cleanup"],
        show_skipped=flags["show_skipped"],
        pre_sudo=flags["pre_sudo"],
        skip=skip_names,
        only=only_names,
        timeout=timeout,
        arguments=arguments,
        arch_package_manager=arch,
        arch_arguments=arch_arguments,
        arch_show_news=show_news,
    )
