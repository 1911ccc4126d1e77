from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Tuple

import numpy as np
from pydantic import ValidationError

from .analysis import commitment_savings, price_curve, reserve_price_breakdown
from .cases import example_case, list_examples
from .config import SolverSpec, load_case_file
from .exceptions import SolverUnavailableError
from .optimization import DispatchCase, SolverSettings, solve_dispatch


def _add_case_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("case", nargs="?", help="Path to case JSON. Omit to use --example.")
    parser.add_argument(
        "--example",
        "-e",
        choices=list_examples(),
        help="Use a built-in example case instead of a case file.",
    )
    parser.add_argument("--demand", type=float, help="Override demand (MW).")
    parser.add_argument("--reserve", type=float, help="Override or add a reserve requirement (MW).")
    parser.add_argument(
        "--unit-commitment",
        action="store_true",
        help="Solve with on/off decisions per generator (MILP, no prices).",
    )
    parser.add_argument("--solver", nargs="+", help="Pyomo solver names, tried in order.")
    parser.add_argument("--time-limit", type=float, help="Solver time limit (s).")
    parser.add_argument("--verbose", "-v", action="count", default=0, help="-v for INFO, -vv for DEBUG.")


def load_inputs(args: argparse.Namespace) -> Tuple[DispatchCase, SolverSettings]:
    if args.case and args.example:
        raise ValueError("give either a case file or --example, not both")
    if args.case:
        spec = load_case_file(args.case)
        case, solver = spec.to_case(), spec.solver
    elif args.example:
        case, solver = example_case(args.example), SolverSpec()
    else:
        raise ValueError("a case file or --example is required")

    if args.demand is not None:
        case = case.with_demand(args.demand)
    if args.reserve is not None:
        case = case.with_reserve_requirement(args.reserve)
    if args.unit_commitment:
        case = case.with_unit_commitment(True)

    overrides = {}
    if args.solver:
        overrides["preference"] = args.solver
    if args.time_limit is not None:
        overrides["time_limit_s"] = args.time_limit
    solver = solver.model_copy(update=overrides)
    return case, solver.to_settings()


def _cmd_solve(args: argparse.Namespace, case: DispatchCase, settings: SolverSettings) -> int:
    solution = solve_dispatch(case, settings)

    if args.output:
        Path(args.output).write_text(json.dumps(solution.to_dict(), indent=2))

    # Minimal console summary
    print(f"Case: {case.name} ({case.formulation.value})")
    print(f"Status: {solution.status.value} [{solution.solver_name}, {solution.solve_time_sec:.3f}s]")
    if solution.has_solution:
        print(solution.to_frame().to_string(float_format=lambda x: f"{x:.2f}"))
        print(f"Total cost: ${solution.total_cost:,.2f}")
    for line in solution.explain():
        print(f"- {line}")
    if solution.is_optimal and solution.has_prices and solution.reserve_price_value is not None:
        print("\nReserve price breakdown:")
        print(reserve_price_breakdown(solution, case).to_string())

    return 0 if solution.is_optimal else 1


def _cmd_sweep(args: argparse.Namespace, case: DispatchCase, settings: SolverSettings) -> int:
    if args.step <= 0 or args.stop < args.start:
        raise ValueError("sweep needs start <= stop and step > 0")
    demands = np.arange(args.start, args.stop + args.step / 2.0, args.step)
    curve = price_curve(case, demands, settings)

    if args.output:
        curve.to_csv(args.output)
    print(curve[["status", "total_cost", "energy_price", "reserve_price", "spillage_mw"]].to_string())
    return 0 if (curve["status"] == "optimal").all() else 1


def _cmd_compare(args: argparse.Namespace, case: DispatchCase, settings: SolverSettings) -> int:
    result = commitment_savings(case, settings)
    print(result.to_string())
    ok = result["dispatch_status"] == "optimal" and result["commitment_status"] == "optimal"
    return 0 if ok else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="powerdispatch",
        description="Single-period economic dispatch, reserve co-optimization and unit commitment.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p_solve = sub.add_parser("solve", help="Solve one dispatch and print the result.")
    _add_case_arguments(p_solve)
    p_solve.add_argument("--output", "-o", help="Path to write the solution JSON.")
    p_solve.set_defaults(func=_cmd_solve)

    p_sweep = sub.add_parser("sweep", help="Re-solve over a range of demand levels.")
    _add_case_arguments(p_sweep)
    p_sweep.add_argument("--start", type=float, required=True, help="First demand level (MW).")
    p_sweep.add_argument("--stop", type=float, required=True, help="Last demand level (MW).")
    p_sweep.add_argument("--step", type=float, default=100.0, help="Demand increment (MW).")
    p_sweep.add_argument("--output", "-o", help="Path to write the price curve CSV.")
    p_sweep.set_defaults(func=_cmd_sweep)

    p_compare = sub.add_parser("compare", help="Compare unit commitment against economic dispatch.")
    _add_case_arguments(p_compare)
    p_compare.set_defaults(func=_cmd_compare)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    level = {0: logging.WARNING, 1: logging.INFO}.get(args.verbose, logging.DEBUG)
    logging.basicConfig(level=level, format="%(levelname)s:%(name)s: %(message)s")

    try:
        case, settings = load_inputs(args)
    except (FileNotFoundError, json.JSONDecodeError) as e:
        print(f"Input error: {e}", file=sys.stderr)
        return 2
    except ValidationError as e:
        print("Input validation error:", file=sys.stderr)
        print(e, file=sys.stderr)
        return 2
    except (ValueError, KeyError) as e:
        print(f"Input error: {e}", file=sys.stderr)
        return 2

    try:
        return args.func(args, case, settings)
    except SolverUnavailableError as e:
        print(f"Solver error: {e}", file=sys.stderr)
        return 3
    except ValueError as e:
        print(f"Input error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
