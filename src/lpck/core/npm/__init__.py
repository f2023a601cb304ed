"""Package manager operations subpackage."""

from lpck.core.npm.abc import PackageManager
from lpck.core.npm.real import RealNpm

__all__ = ["PackageManager", "RealNpm"]
