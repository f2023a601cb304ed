"""Rich rendering of pipeline results."""

from pathlib import Path

from rich.panel import Panel
from rich.text import Text

from lpck.core.orchestrator import RunResult


def format_run_summary(result: RunResult, archive_dir: Path) -> Panel:
    """Format the final summary box for a pack-and-install run.

    Args:
        result: Result returned by run_local_install
        archive_dir: Directory the archives were packed into

    Returns:
        Rich Panel with status, linked packages and installed archives

    Example:
        >>> console = Console(stderr=True)
        >>> console.print(format_run_summary(result, ctx.paths.packs_dir))
    """
    lines: list[Text] = []

    if result.succeeded:
        lines.append(Text("Status: Success", style="green"))
    else:
        lines.append(Text("Status: Packing failed", style="red"))

    lines.append(Text(f"Origin packages: {len(result.available)}"))

    if result.substituted:
        lines.append(Text(f"Linked to local archives: {', '.join(result.substituted)}"))

    if result.installed:
        lines.append(Text("Installed:"))
        for path in result.installed:
            lines.append(Text(f"  {path.name}", style="dim"))
    else:
        lines.append(Text("Installed: nothing", style="yellow"))

    lines.append(Text(f"Archive directory: {archive_dir}", style="dim"))

    if result.packaging_error is not None:
        lines.append(Text(""))
        lines.append(Text(str(result.packaging_error), style="red bold"))
        lines.append(Text("Installed archives may be stale or missing.", style="red"))

    content = Text("\n").join(lines)
    title = "Local Install Complete" if result.succeeded else "Local Install Incomplete"
    return Panel(
        content, title=title, border_style="green" if result.succeeded else "red", padding=(1, 2)
    )
