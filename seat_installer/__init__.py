"""SeAT Installer — provision and maintain SeAT on a Linux host."""

__version__ = "0.1.0"
