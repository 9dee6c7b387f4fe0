"""
Display utilities for the command line interface
"""

from typing import Dict, List, Any

import pandas as pd
from rich.console import Console as RichConsole

from ..analysis.frontier import FrontierResult
from ..analysis.scenario import ScenarioRiskResult
from ..core.types import OptimizationResult
from ..measures import MeasureInfo
from ..utils.helpers import create_rich_table, format_number, format_percentage, format_table, weights_table_rows


class Display:
    """
    Handles formatted output to the console

    With plain=True tables are rendered as text with tabulate instead of
    rich tables, which keeps the output stable when piped.
    """

    def __init__(self, plain: bool = False, console: RichConsole = None):
        self.plain = plain
        self.console = console or RichConsole()

    def print(self, text: str, style: str = ""):
        """Print text with optional style"""
        self.console.print(text, style=style)

    def print_success(self, message: str):
        """Print success message"""
        self.console.print(f"[+] {message}", style="bold green")

    def print_error(self, message: str):
        """Print error message"""
        self.console.print(f"[-] {message}", style="bold red")

    def print_warning(self, message: str):
        """Print warning message"""
        self.console.print(f"[!] {message}", style="bold yellow")

    def print_info(self, message: str):
        """Print info message"""
        self.console.print(f"[*] {message}", style="bold blue")

    def _print_rows(self, title: str, rows: List[Dict[str, Any]]):
        if self.plain:
            self.console.print(title)
            self.console.print(format_table(rows), markup=False, highlight=False)
            return

        if not rows:
            self.print_warning("No data to display")
            return

        self.console.print(create_rich_table(title, rows))

    def print_measures(self, measures: List[MeasureInfo]):
        """Display the registered risk measures"""
        rows = [
            {
                "Name": info.name,
                "Parameter": info.parameter.value,
                "Convex": "yes" if info.convex else "no",
                "Description": info.description,
            }
            for info in measures
        ]
        self._print_rows("Risk Measures", rows)

    def print_optimization_result(self, result: OptimizationResult, measure_name: str = ""):
        """Display optimal weights and the run summary"""
        summary = {
            "Backend": result.backend.value,
            "Objective": result.objective.value,
            "Mode": result.mode.value,
            "Risk measure": measure_name or "-",
            "Risk parameter": str(result.risk_param),
            "Objective value": format_number(result.objective_value),
            "Evaluations": result.evaluations,
        }
        if result.lam is not None:
            summary["Lambda"] = result.lam

        self._print_rows("Optimization Summary",
                         [{"Property": k, "Value": v} for k, v in summary.items()])
        self._print_rows("Optimal Weights", weights_table_rows(result.weights_by_asset()))

    def print_frontier(self, frontier: FrontierResult):
        """Display the efficient frontier, one row per target"""
        frame = frontier.to_frame()
        if frame.empty:
            self.print_warning("Frontier is empty")
            return
        self.print_dataframe(frame, title="Efficient Frontier")

    def print_scenario_summary(self, summary: ScenarioRiskResult, measure_name: str = ""):
        """Display the distribution of simulated risk values"""
        rows = [{"Statistic": k, "Value": format_number(v) if isinstance(v, float) else v}
                for k, v in summary.to_dict().items()]
        title = f"Scenario Risk ({measure_name})" if measure_name else "Scenario Risk"
        self._print_rows(title, rows)

    def print_dataframe(self, df: pd.DataFrame, title: str = "Data", max_rows: int = 50):
        """Display a pandas DataFrame"""
        if df is None or df.empty:
            self.print_warning("No data to display")
            return

        if len(df) > max_rows:
            display_df = df.head(max_rows)
            self.print_warning(f"Showing first {max_rows} of {len(df)} rows")
        else:
            display_df = df

        rows = [
            {str(col): format_number(val) if isinstance(val, float) else val for col, val in row.items()}
            for _, row in display_df.iterrows()
        ]
        self._print_rows(title, rows)

    def print_weights(self, weights: Dict[str, float], title: str = "Weights"):
        """Display a mapping of asset weights"""
        self._print_rows(title, weights_table_rows(weights))

    def print_allocation_bar(self, weights: Dict[str, float], width: int = 40):
        """Horizontal bar per asset proportional to its weight"""
        for name, w in weights.items():
            bar = "█" * int(round(w * width))
            self.console.print(f"{name:>12} {bar} {format_percentage(w)}", highlight=False)
