"""Credential pool: rotation and cooldown of provider keys."""

from .pool import CredentialPoolManager, classify_health

__all__ = ["CredentialPoolManager", "classify_health"]
