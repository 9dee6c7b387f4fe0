"""
Helper utility functions
"""

from typing import Any, Dict, List, Mapping

from rich.table import Table
from tabulate import tabulate


def format_percentage(value: float, decimals: int = 2) -> str:
    """Format a fraction as a percentage (0.125 -> 12.50%)"""
    if value is None:
        return "N/A"
    return f"{value * 100:.{decimals}f}%"


def format_number(value: float, decimals: int = 6) -> str:
    """Format a number with specified decimals"""
    if value is None:
        return "N/A"
    return f"{value:,.{decimals}f}"


def format_table(data: List[Dict[str, Any]], headers: List[str] = None,
                 tablefmt: str = "simple") -> str:
    """
    Format data as a table

    Args:
        data: List of dictionaries with table data
        headers: List of header names (uses dict keys if None)
        tablefmt: Table format (simple, grid, fancy_grid, etc.)

    Returns:
        Formatted table string
    """
    if not data:
        return "No data to display"

    if headers is None and isinstance(data[0], dict):
        headers = "keys"

    return tabulate(data, headers=headers, tablefmt=tablefmt)


def weights_table_rows(weights: Mapping[str, float], decimals: int = 4) -> List[Dict[str, Any]]:
    """Rows of asset/weight pairs for format_table or create_rich_table"""
    return [
        {"Asset": name, "Weight": f"{w:.{decimals}f}", "Allocation": format_percentage(w)}
        for name, w in weights.items()
    ]


def create_rich_table(title: str, rows: List[Dict[str, Any]], key_style: str = "cyan") -> Table:
    """
    Rich counterpart of format_table

    The first column is treated as the row label and styled with key_style.
    """
    table = Table(title=title, show_header=True, header_style="bold magenta")
    columns = list(rows[0].keys()) if rows else []

    for i, col in enumerate(columns):
        table.add_column(str(col), style=key_style if i == 0 else "white")

    for row in rows:
        table.add_row(*[str(row[col]) for col in columns])

    return table
