"""topup - update every package manager, toolchain and dotfile repo on this machine."""

__version__ = "0.4.0"
