#!/usr/bin/env python3
"""
Command line interface for RiskLib

Usage:
    risklib measures
    risklib optimize --returns returns.csv --measure cvar --alpha 0.05 --objective utility --lam 2
    risklib frontier --sample --measure second_lower_partial_moment --targets 0,0.0005,0.001
    risklib scenario --returns returns.csv --weights 0.25,0.25,0.5 --measure maximum_drawdown
"""

import argparse
import sys
from dataclasses import replace
from typing import List, Optional

import numpy as np
import pandas as pd

from .analysis.frontier import plot_efficient_frontier
from .core.config import RiskLibConfig, load_config
from .core.errors import RiskLibError
from .core.types import Backend, ObjectiveKind, OptimizationMode, ParamKind
from .measures import RISK_MEASURES, get_risk_measure
from .optimizers.engine import PortfolioOptimizer
from .ui.display import Display
from .utils.logging_config import get_logger, setup_logging
from .utils.sample_data import create_sample_returns


def _parse_floats(text: str) -> List[float]:
    try:
        return [float(x) for x in text.split(',') if x.strip()]
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected comma-separated numbers, got '{text}'")


def load_returns(path: Optional[str], sample: bool, n_periods: int = 252, n_assets: int = 4) -> pd.DataFrame:
    """
    Load a returns matrix from CSV, or build the synthetic sample.

    Non-numeric columns (dates, labels) are dropped.
    """
    if sample or path is None:
        return create_sample_returns(n_periods=n_periods, n_assets=n_assets)

    df = pd.read_csv(path)
    numeric = df.select_dtypes(include=[np.number])
    if numeric.empty:
        raise ValueError(f"No numeric return columns found in {path}")
    return numeric


def _add_data_arguments(parser: argparse.ArgumentParser, default_measure: str = 'standard_deviation'):
    parser.add_argument(
        '--returns',
        type=str,
        default=None,
        help='CSV file of returns (rows=periods, columns=assets)'
    )
    parser.add_argument(
        '--sample',
        action='store_true',
        help='Use synthetic sample returns instead of a CSV file'
    )
    parser.add_argument(
        '--measure',
        type=str,
        default=default_measure,
        help=f'Risk measure name (default: {default_measure}, see "risklib measures")'
    )
    parser.add_argument(
        '--alpha',
        type=float,
        default=None,
        help='Tail probability passed to the risk measure'
    )


def _add_optimizer_arguments(parser: argparse.ArgumentParser):
    parser.add_argument(
        '--backend',
        choices=[b.value for b in Backend],
        default=Backend.STOCHASTIC.value,
        help='Optimizer backend (default: stochastic)'
    )
    parser.add_argument(
        '--mode',
        choices=[m.value for m in OptimizationMode],
        default=OptimizationMode.MEAN_RISK.value,
        help='Optimization mode (default: mean_risk)'
    )
    parser.add_argument(
        '--samples',
        type=int,
        default=None,
        help='Candidates for the stochastic backend (default from config)'
    )
    parser.add_argument(
        '--seed',
        type=int,
        default=None,
        help='Random seed (default from config)'
    )
    parser.add_argument(
        '--workers',
        type=int,
        default=None,
        help='Worker threads (default from config)'
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='risklib',
        description='Risk-aware portfolio optimization',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Minimum CVaR portfolio on synthetic data
  risklib optimize --sample --measure cvar --alpha 0.05 --objective minimize --seed 7

  # Utility with the solver backend
  risklib optimize --returns returns.csv --backend convex --objective utility --lam 3

  # Frontier over targets, saved as a plot
  risklib frontier --sample --measure first_lower_partial_moment --targets 0,0.0005,0.001 --plot frontier.png
        """
    )
    parser.add_argument(
        '--config',
        type=str,
        default=None,
        help='YAML configuration file'
    )
    parser.add_argument(
        '--plain',
        action='store_true',
        help='Plain text tables (no colors)'
    )
    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Debug logging and a closing event counter summary'
    )

    subparsers = parser.add_subparsers(dest='command')
    subparsers.required = True

    subparsers.add_parser('measures', help='List registered risk measures')

    optimize_parser = subparsers.add_parser('optimize', help='Optimize a portfolio')
    _add_data_arguments(optimize_parser)
    _add_optimizer_arguments(optimize_parser)
    optimize_parser.add_argument(
        '--objective',
        choices=[o.value for o in ObjectiveKind],
        default=ObjectiveKind.MINIMIZE.value,
        help='Objective (default: minimize)'
    )
    optimize_parser.add_argument('--lam', type=float, default=None, help='Risk aversion for utility')
    optimize_parser.add_argument('--target', type=float, default=None,
                                 help='Threshold passed to the risk measure')
    optimize_parser.add_argument('--risk-level', type=float, default=0.0,
                                 help='Target risk contribution for risk parity (default: 0)')

    frontier_parser = subparsers.add_parser('frontier', help='Compute an efficient frontier')
    _add_data_arguments(frontier_parser, default_measure='second_lower_partial_moment')
    _add_optimizer_arguments(frontier_parser)
    frontier_parser.add_argument('--targets', type=_parse_floats, default=None,
                                 help='Comma-separated targets (default: 10 points across asset means)')
    frontier_parser.add_argument('--lam', type=float, default=1.0, help='Risk aversion (default: 1.0)')
    frontier_parser.add_argument('--plot', type=str, default=None,
                                 help='Save a frontier plot to this file (requires matplotlib)')

    scenario_parser = subparsers.add_parser('scenario', help='Monte Carlo scenario risk')
    _add_data_arguments(scenario_parser)
    scenario_parser.add_argument('--weights', type=_parse_floats, default=None,
                                 help='Comma-separated weights (default: equal weights)')
    scenario_parser.add_argument('--target', type=float, default=None,
                                 help='Threshold passed to the risk measure')
    scenario_parser.add_argument('--simulations', type=int, default=None,
                                 help='Number of simulated paths (default from config)')
    scenario_parser.add_argument('--periods', type=int, default=None,
                                 help='Periods per path (default from config)')
    scenario_parser.add_argument('--seed', type=int, default=None, help='Random seed')
    scenario_parser.add_argument('--workers', type=int, default=None, help='Worker threads')

    return parser


def _apply_overrides(config: RiskLibConfig, args: argparse.Namespace) -> RiskLibConfig:
    optimizer = config.optimizer
    simulation = config.simulation
    samples = getattr(args, 'samples', None)
    seed = getattr(args, 'seed', None)
    workers = getattr(args, 'workers', None)

    if samples is not None:
        optimizer = replace(optimizer, n_samples=samples)
    if seed is not None:
        optimizer = replace(optimizer, random_seed=seed)
        simulation = replace(simulation, random_seed=seed)
    if workers is not None:
        optimizer = replace(optimizer, n_workers=workers)
        simulation = replace(simulation, n_workers=workers)
    if getattr(args, 'simulations', None) is not None:
        simulation = replace(simulation, n_simulations=args.simulations)
    if getattr(args, 'periods', None) is not None:
        simulation = replace(simulation, n_periods=args.periods)

    return replace(config, optimizer=optimizer, simulation=simulation)


def _run_optimize(args, optimizer: PortfolioOptimizer, display: Display) -> int:
    result = optimizer.optimize(
        args.objective,
        mode=args.mode,
        lam=args.lam,
        alpha=args.alpha,
        target=args.target,
        risk_level=args.risk_level,
    )
    display.print_optimization_result(result, measure_name=optimizer.measure_name)

    risk, ret = optimizer.performance(result.weights, alpha=args.alpha, target=args.target)
    display.print_info(f"Portfolio risk: {risk:.6f}  expected return: {ret:.6f}")
    if not display.plain:
        display.print_allocation_bar(result.weights_by_asset())
    return 0


def _run_frontier(args, optimizer: PortfolioOptimizer, display: Display) -> int:
    # each point passes either --alpha or the target itself to the measure
    parameter = get_risk_measure(args.measure).parameter
    if args.alpha is None and parameter is not ParamKind.TARGET:
        raise ValueError(f"{args.measure} does not take a target; use a target measure or pass --alpha")
    if args.alpha is not None and parameter is not ParamKind.ALPHA:
        raise ValueError(f"{args.measure} does not take --alpha")

    targets = args.targets
    if targets is None:
        means = optimizer.returns.mean(axis=0)
        targets = list(np.linspace(means.min(), means.max(), 10))

    frontier = optimizer.efficient_frontier(targets, lam=args.lam, alpha=args.alpha, mode=args.mode)
    display.print_frontier(frontier)

    if args.plot:
        ax = plot_efficient_frontier(frontier, title=f"Efficient Frontier ({optimizer.measure_name})")
        ax.figure.savefig(args.plot, dpi=150, bbox_inches='tight')
        display.print_success(f"Frontier plot saved to {args.plot}")
    return 0


def _run_scenario(args, optimizer: PortfolioOptimizer, display: Display) -> int:
    weights = args.weights
    if weights is None:
        weights = [1.0 / optimizer.n_assets] * optimizer.n_assets

    summary = optimizer.scenario_analysis(weights, alpha=args.alpha, target=args.target)
    display.print_scenario_summary(summary, measure_name=optimizer.measure_name)
    return 0


_COMMANDS = {
    'optimize': _run_optimize,
    'frontier': _run_frontier,
    'scenario': _run_scenario,
}


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point"""
    parser = build_parser()
    args = parser.parse_args(argv)
    display = Display(plain=args.plain)

    try:
        config = _apply_overrides(load_config(args.config), args)
        log_settings = config.logging
        setup_logging(
            log_dir=log_settings.log_dir,
            log_level="DEBUG" if args.verbose else log_settings.level,
            console_enabled=log_settings.console_enabled,
            file_enabled=log_settings.file_enabled,
            json_format=log_settings.json_format,
            track_performance=args.verbose,
        )

        if args.command == 'measures':
            display.print_measures(list(RISK_MEASURES.values()))
            return 0

        info = get_risk_measure(args.measure)
        returns = load_returns(args.returns, args.sample)
        backend = getattr(args, 'backend', Backend.STOCHASTIC.value)
        optimizer = PortfolioOptimizer(returns, info.func, backend=backend, config=config)

        code = _COMMANDS[args.command](args, optimizer, display)
        if args.verbose:
            get_logger().log_performance_summary()
        return code

    except KeyboardInterrupt:
        display.print_warning("Interrupted by user")
        return 130
    except (RiskLibError, ValueError, OSError) as e:
        display.print_error(f"{type(e).__name__}: {e}")
        return 1


if __name__ == '__main__':
    sys.exit(main())
