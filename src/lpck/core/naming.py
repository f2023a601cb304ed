"""Deterministic naming for packed archives."""


def sanitize_package_name(name: str) -> str:
    """Flatten a (possibly scoped) npm package name into a file name component.

    Removes every "@" and replaces every "/" with "-", matching the file names
    `npm pack` writes.

    Examples:
        >>> sanitize_package_name("@scope/pkg")
        'scope-pkg'
        >>> sanitize_package_name("plain")
        'plain'
    """
    return name.replace("@", "").replace("/", "-")


def archive_name(name: str, version: str) -> str:
    """Return the archive file name `npm pack` produces for name@version.

    Examples:
        >>> archive_name("@scope/pkg", "1.2.3")
        'scope-pkg-1.2.3.tgz'
    """
    return sanitize_package_name(f"{name}-{version}.tgz")
