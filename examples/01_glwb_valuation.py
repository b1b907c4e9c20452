#!/usr/bin/env python3
"""
GLWB Valuation Demo.

Prices Guaranteed Lifetime Withdrawal Benefit riders with the path-level
Monte Carlo engine.

Key Concepts:
- The insurer pays the guaranteed withdrawal once the account value (AV) is
  exhausted, for as long as the policyholder is alive and in force.
- Guarantee cost = E[PV(shortfall)] / premium; fair fee balances it against
  E[PV(rider fees)] / premium.
- Behavioral models (dynamic lapse, withdrawal utilization, expenses) change
  both legs and are optional.

Usage:
    python examples/01_glwb_valuation.py          # Full demo
    python examples/01_glwb_valuation.py --ci     # CI mode (fewer paths)
    python examples/01_glwb_valuation.py --workers 4
"""

import argparse
import sys
from dataclasses import dataclass

# Add src to path if running as script
sys.path.insert(0, "src")

from glwb_pricing import (
    DynamicLapseModel,
    ExpenseConfig,
    GLWBPathSimulator,
    GLWBPriceResult,
    GWBConfig,
    LapseConfig,
    PolicyExpenseModel,
    SimpleWithdrawalModel,
    SimulatorConfig,
    WithdrawalConfig,
)

PREMIUM = 100_000.0


@dataclass(frozen=True)
class RiderDesign:
    """A named rider design for the comparison table."""

    name: str
    config: GWBConfig


def sample_designs() -> list[RiderDesign]:
    """Baseline, aggressive and conservative rider designs."""
    return [
        RiderDesign(
            "Standard",
            GWBConfig(rollup_type="compound", rollup_rate=0.06, withdrawal_rate=0.05, fee_rate=0.01),
        ),
        RiderDesign(
            "Aggressive",
            GWBConfig(rollup_type="compound", rollup_rate=0.08, withdrawal_rate=0.06, fee_rate=0.0125),
        ),
        RiderDesign(
            "Conservative",
            GWBConfig(
                rollup_type="simple",
                rollup_rate=0.04,
                withdrawal_rate=0.04,
                fee_rate=0.0075,
                ratchet_enabled=False,
            ),
        ),
    ]


def print_comparison(designs: list[RiderDesign], results: list[GLWBPriceResult]) -> None:
    print("\n" + "=" * 78)
    print("GLWB RIDER COMPARISON (age 65, no deferral)")
    print("=" * 78)
    print("\n  {:<14} {:>10} {:>10} {:>10} {:>10} {:>12}".format(
        "Design", "Cost", "Fees", "Std Err", "P(ruin)", "Ruin Year"
    ))
    print("  " + "-" * 70)
    for design, result in zip(designs, results):
        ruin_year = f"{result.mean_ruin_year:.1f}" if result.mean_ruin_year is not None else "-"
        print("  {:<14} {:>9.2%} {:>9.2%} {:>9.3%} {:>9.2%} {:>12}".format(
            design.name,
            result.price,
            result.fee_value,
            result.standard_error,
            result.prob_ruin,
            ruin_year,
        ))


def print_behavioral(plain: GLWBPriceResult, behavioral: GLWBPriceResult) -> None:
    print("\n" + "=" * 60)
    print("BEHAVIORAL ASSUMPTIONS (Standard design)")
    print("=" * 60)
    print(f"\n  Cost, full utilization, no lapse:   {plain.price:.2%}")
    print(f"  Cost, dynamic lapse + utilization:  {behavioral.price:.2%}")
    print(f"  Probability of lapse:               {behavioral.prob_lapse:.2%}")
    if behavioral.mean_lapse_year is not None:
        print(f"  Mean lapse year:                    {behavioral.mean_lapse_year:.1f}")
    print(f"  Average utilization:                {behavioral.avg_utilization:.2%}")
    print(f"  PV of expenses:                     ${behavioral.total_expenses_pv:,.0f}")
    low, high = behavioral.confidence_interval(0.95)
    print(f"  95% interval for cost:              [{low:.2%}, {high:.2%}]")


def main() -> None:
    """Run GLWB valuation demo."""
    parser = argparse.ArgumentParser(description="GLWB Valuation Demo")
    parser.add_argument("--ci", action="store_true", help="CI mode (fewer paths)")
    parser.add_argument("--paths", type=int, default=10_000, help="Number of MC paths (default: 10000)")
    parser.add_argument("--workers", type=int, default=1, help="Worker processes (default: 1)")
    args = parser.parse_args()

    n_paths = 1_000 if args.ci else args.paths
    sim_config = SimulatorConfig(
        risk_free_rate=0.04,
        volatility=0.18,
        n_paths=n_paths,
        seed=42,
        n_workers=args.workers,
    )

    print("\n" + "=" * 60)
    print("GLWB VALUATION DEMO")
    print("=" * 60)
    print(f"\nSimulation settings: {n_paths:,} paths, seed=42, workers={args.workers}")

    designs = sample_designs()
    results = [GLWBPathSimulator(d.config, sim_config).price(PREMIUM, 65) for d in designs]
    print_comparison(designs, results)

    standard = designs[0].config
    behavioral = GLWBPathSimulator(
        standard,
        sim_config,
        lapse_model=DynamicLapseModel(LapseConfig()),
        withdrawal_model=SimpleWithdrawalModel(WithdrawalConfig()),
        expense_model=PolicyExpenseModel(ExpenseConfig()),
    ).price(PREMIUM, 65)
    print_behavioral(results[0], behavioral)

    print("\nSolving for the fair fee (Standard design)...")
    simulator = GLWBPathSimulator(standard, sim_config)
    fair_fee = simulator.calculate_fair_fee(PREMIUM, 65, fee_bounds=(0.0, 0.05))
    print(f"  Fair annual fee: {fair_fee:.3%} of the benefit base")

    print("\nSensitivities (Standard design)...")
    sens = simulator.sensitivity_analysis(PREMIUM, 65)
    print(f"  dCost/dSigma:  {sens['sigma_sensitivity']:+.4f}")
    print(f"  dCost/dRate:   {sens['rate_sensitivity']:+.4f}")
    print(f"  dCost/dAge:    {sens['age_sensitivity']:+.4f} per year")

    print("\n" + "=" * 60)
    print("DEMO COMPLETE")
    print("=" * 60)


if __name__ == "__main__":
    main()
