"""Python runtime discovery for CodePulse client."""

from .locator import RuntimeLocator, default_candidates

__all__ = ["RuntimeLocator", "default_candidates"]
