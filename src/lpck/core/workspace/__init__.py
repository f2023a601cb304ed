"""Workspace discovery and the per-run package registry."""

from lpck.core.workspace.registry import (
    AvailablePackage,
    RegistryEntry,
    WorkspaceRegistry,
    declared_dependencies,
)
from lpck.core.workspace.resolver import resolve_workspace

__all__ = [
    "AvailablePackage",
    "RegistryEntry",
    "WorkspaceRegistry",
    "declared_dependencies",
    "resolve_workspace",
]
