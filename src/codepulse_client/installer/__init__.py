"""Dependency installation for CodePulse client."""

from .archive import InstallError
from .dependency_installer import DependencyInstaller

__all__ = ["DependencyInstaller", "InstallError"]
