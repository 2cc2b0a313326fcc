"""Licore: automated lint review for Bitbucket pull requests."""

__version__ = "0.1.0"
