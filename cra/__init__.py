"""Helm chart release automation for GitHub Actions."""

__version__ = "0.1.0"
