"""
Output - Console output formatting.

Provides pretty-printed output with colors, and a JSON mode for scripting.
"""

from __future__ import annotations

import json
import sys
from typing import Any

from adotasks.core.domain import WorkItem, WorkItemState


class Colors:
    """ANSI color codes for terminal output."""

    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"

    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    BLUE = "\033[34m"
    CYAN = "\033[36m"


class Symbols:
    """Unicode symbols for terminal output."""

    CHECK = "✓"
    CROSS = "✗"
    ARROW = "→"
    DOT = "•"
    WARN = "⚠"
    INFO = "ℹ"


class Console:
    """
    Console output helper with colors and formatting.

    Status messages go to stdout and are suppressed in quiet mode; errors
    always print. In JSON mode only ``emit_json`` writes to stdout and
    errors are collected so they can be reported in the JSON document.

    Attributes:
        color: Whether to use ANSI color codes.
        quiet: Whether to suppress most output.
        json_mode: Whether to output JSON for programmatic use.
    """

    def __init__(
        self,
        color: bool = True,
        quiet: bool = False,
        json_mode: bool = False,
    ):
        """
        Initialize the console output helper.

        Args:
            color: Enable colored output. Automatically disabled if stdout is not a TTY.
            quiet: Suppress most output, only show errors.
            json_mode: Output JSON format instead of text.
        """
        self.json_mode = json_mode
        self.color = color and sys.stdout.isatty() and not json_mode
        self.quiet = quiet or json_mode

        self._json_errors: list[str] = []

    def _c(self, text: str, *codes: str) -> str:
        if not self.color:
            return text
        return "".join(codes) + text + Colors.RESET

    def print(self, text: str = "") -> None:
        """Print text to stdout unless in quiet mode."""
        if self.quiet:
            return
        print(text)

    def section(self, text: str) -> None:
        if self.quiet:
            return
        self.print()
        self.print(self._c(f"{Symbols.ARROW} {text}", Colors.BOLD, Colors.BLUE))

    def success(self, text: str) -> None:
        if self.quiet:
            return
        self.print(self._c(f"  {Symbols.CHECK} {text}", Colors.GREEN))

    def error(self, text: str) -> None:
        """
        Print an error message with cross symbol.

        Always prints, even in quiet mode. Collected in JSON mode.
        """
        if self.json_mode:
            self._json_errors.append(text)
            return
        print(self._c(f"  {Symbols.CROSS} {text}", Colors.RED), file=sys.stderr)

    def config_errors(self, errors: list[str]) -> None:
        """Print configuration errors with a hint on where settings live."""
        if self.json_mode:
            self._json_errors.extend(errors)
            return

        print(self._c(f"  {Symbols.CROSS} Configuration errors:", Colors.RED, Colors.BOLD), file=sys.stderr)
        for error in errors:
            print(f"    {Symbols.DOT} {error}", file=sys.stderr)
        print(
            self._c(
                "    Settings are read from .adotasks.yaml, .adotasks.toml, pyproject.toml, "
                ".env and the environment.",
                Colors.DIM,
            ),
            file=sys.stderr,
        )

    def connection_error(self, url: str = "", reason: str = "") -> None:
        """Print a connection failure with the most common causes."""
        message = f"Connection failed: {url}" if url else "Connection failed"
        if reason:
            message = f"{message} ({reason})"

        if self.json_mode:
            self._json_errors.append(message)
            return

        print(self._c(f"  {Symbols.CROSS} {message}", Colors.RED), file=sys.stderr)
        print(
            self._c("    Check the organization and project names and that the PAT has not expired.", Colors.DIM),
            file=sys.stderr,
        )

    def warning(self, text: str) -> None:
        if self.quiet:
            return
        self.print(self._c(f"  {Symbols.WARN} {text}", Colors.YELLOW))

    def info(self, text: str) -> None:
        if self.quiet:
            return
        self.print(self._c(f"  {Symbols.INFO} {text}", Colors.CYAN))

    def detail(self, text: str) -> None:
        if self.quiet:
            return
        self.print(self._c(f"    {text}", Colors.DIM))

    def item(self, text: str, status: str | None = None) -> None:
        """
        Print a list item with optional status indicator.

        Args:
            text: Item text to display.
            status: "ok", "fail", or any other label shown dimmed.
        """
        if self.quiet:
            return
        status_str = ""
        if status == "ok":
            status_str = self._c(f" [{Symbols.CHECK}]", Colors.GREEN)
        elif status == "fail":
            status_str = self._c(f" [{Symbols.CROSS}]", Colors.RED)
        elif status:
            status_str = self._c(f" [{status}]", Colors.DIM)

        self.print(f"    {Symbols.DOT} {text}{status_str}")

    def table(self, headers: list[str], rows: list[list[str]]) -> None:
        """
        Print a formatted table with headers.

        Automatically calculates column widths based on content.
        """
        if self.quiet:
            return
        widths = [len(h) for h in headers]
        for row in rows:
            for i, cell in enumerate(row):
                if i < len(widths):
                    widths[i] = max(widths[i], len(str(cell)))

        header_line = "  " + "  ".join(
            self._c(h.ljust(widths[i]), Colors.BOLD) for i, h in enumerate(headers)
        )
        self.print(header_line)
        self.print("  " + "  ".join("-" * w for w in widths))

        for row in rows:
            row_line = "  " + "  ".join(
                str(cell).ljust(widths[i]) if i < len(widths) else str(cell)
                for i, cell in enumerate(row)
            )
            self.print(row_line)

    # -------------------------------------------------------------------------
    # Work Items
    # -------------------------------------------------------------------------

    def work_items(self, items: list[WorkItem]) -> None:
        """Print work items as a table (or a JSON list in JSON mode)."""
        if self.json_mode:
            self.emit_json({"work_items": [item.to_dict() for item in items]})
            return
        if not items:
            self.info("No work items found")
            return
        rows = [
            [item.id, item.work_item_type, item.state or "", item.summary]
            for item in items
        ]
        self.table(["ID", "Type", "State", "Title"], rows)

    def work_item(self, item: WorkItem) -> None:
        """Print the details of one work item."""
        if self.json_mode:
            self.emit_json({"work_item": item.to_dict()})
            return
        self.section(item.presentable_name)
        self.detail(f"Type:     {item.work_item_type} ({item.type.display_name})")
        self.detail(f"State:    {item.state or '-'}")
        self.detail(f"Revision: {item.revision}")
        if item.created:
            self.detail(f"Created:  {item.created.isoformat()}")
        if item.updated:
            self.detail(f"Updated:  {item.updated.isoformat()}")
        if item.issue_url:
            self.detail(f"URL:      {item.issue_url}")
        if item.description:
            self.print()
            self.print(item.description)

    def states(self, states: set[WorkItemState] | frozenset[WorkItemState]) -> None:
        names = sorted(state.name for state in states)
        if self.json_mode:
            self.emit_json({"states": names})
            return
        if not names:
            self.info("No states available")
            return
        for name in names:
            self.item(name)

    def emit_json(self, data: dict[str, Any]) -> None:
        """Write a JSON document to stdout, with any collected errors."""
        output = dict(data)
        if self._json_errors:
            output["errors"] = list(self._json_errors)
        print(json.dumps(output, indent=2, default=str))
