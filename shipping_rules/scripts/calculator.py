"""
Shipping Options Calculator
===========================

Resolves the shipping options of a cart for one destination and prints the
options, their packages and any items that cannot ship.

Usage:
    python -m shipping_rules.scripts.calculator --rules rules.json --cart cart.csv --zip 01500
    python -m shipping_rules.scripts.calculator --rules rules.json --cart cart.csv --state Puebla
    python -m shipping_rules.scripts.calculator --interactive

With no --rules / --cart the bundled examples in data/examples/ are used.
"""

import argparse
import logging
import sys
from pathlib import Path

import polars as pl

from shipping_rules.calculate_shipping import resolve_shipping
from shipping_rules.data import load_cart
from shipping_rules.models import Address, ShippingResolution
from shipping_rules.pipeline import options_frame, packages_frame
from shipping_rules.rules import load_rules
from shipping_rules.version import VERSION


# =============================================================================
# CONFIGURATION
# =============================================================================

EXAMPLES_DIR = Path(__file__).parent.parent / "data" / "examples"
DEFAULT_RULES = EXAMPLES_DIR / "rules.json"
DEFAULT_CART = EXAMPLES_DIR / "cart.csv"


def get_user_input() -> dict:
    """Prompt user for destination and input files."""
    print("\n=== Shipping Options Calculator ===")
    print(f"Version: {VERSION}\n")

    rules = input(f"Rules file [default: {DEFAULT_RULES.name}]: ").strip()
    cart = input(f"Cart file [default: {DEFAULT_CART.name}]: ").strip()
    zip_code = input("Destination ZIP code: ").strip()
    state = input("Destination state (e.g., Puebla): ").strip()
    previous = input("Previously selected rule id [optional]: ").strip()

    return {
        "rules": Path(rules) if rules else DEFAULT_RULES,
        "cart": Path(cart) if cart else DEFAULT_CART,
        "zip": zip_code,
        "state": state,
        "previous": previous or None,
    }


def print_results(result: ShippingResolution, address: Address) -> None:
    """Print resolution results."""
    print("\n" + "=" * 60)
    print("SHIPPING OPTIONS")
    print("=" * 60)

    print(f"\nDestination: ZIP {address.zip or '-'}, state {address.state or '-'}")
    print(f"Calculator version: {result.calculator_version}")

    if not result.is_complete:
        print("\nIncomplete input: add items to the cart and a ZIP code or state.")
        return

    print(f"Subtotal (shippable items): ${result.subtotal:>10,.2f}")

    if not result.options:
        print("\nNo shipping option covers this destination.")
    else:
        with pl.Config(tbl_rows=-1, tbl_cols=-1, fmt_str_lengths=40, tbl_hide_dataframe_shape=True):
            print("\n--- Options ---")
            print(options_frame(result.options, result.selected_option))
            print("\n--- Packages ---")
            print(packages_frame(result.options))

        selected = result.selected_option
        print(f"\nSelected: {selected.name} (${selected.total_cost:,.2f}, "
              f"{selected.delivery_estimate.min_days}-{selected.delivery_estimate.max_days} days)")

    if result.ineligible_items:
        print("\n--- Cannot ship to this destination ---")
        for item in result.ineligible_items:
            print(f"  {item.product.id:<12} {item.product.name or '':<30} x{item.quantity}")

    if result.diagnostics:
        print("\n--- Rule warnings ---")
        for diagnostic in result.diagnostics:
            print(f"  [{diagnostic.rule_id}] {diagnostic.code}: {diagnostic.message}")
    print()


def run(rules_path: Path, cart_path: Path, address: Address, previous: str | None) -> ShippingResolution:
    """Load inputs, resolve, and print."""
    rules = load_rules(rules_path)
    cart = load_cart(cart_path)
    print(f"Loaded {len(rules)} rules and {len(cart)} cart lines")

    result = resolve_shipping(cart, address, rules, previous_rule_id=previous)
    print_results(result, address)
    return result


def main():
    parser = argparse.ArgumentParser(
        description="Resolve shipping options for a cart and destination",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Cart CSV columns:
  product_id, name, weight_kg, price, rule_ids ("|"-separated), quantity
        """,
    )
    parser.add_argument(
        "--rules",
        type=Path,
        default=DEFAULT_RULES,
        help="JSON file with rule documents (default: bundled example)",
    )
    parser.add_argument(
        "--cart",
        type=Path,
        default=DEFAULT_CART,
        help="Cart CSV (default: bundled example)",
    )
    parser.add_argument("--zip", default="", help="Destination ZIP code")
    parser.add_argument("--state", default="", help="Destination state name or abbreviation")
    parser.add_argument(
        "--previous",
        default=None,
        metavar="RULE_ID",
        help="Rule id of the previously selected option",
    )
    parser.add_argument(
        "--interactive",
        action="store_true",
        help="Prompt for inputs instead of reading flags",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Show rule selection details",
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        if args.interactive:
            inputs = get_user_input()
        else:
            inputs = {
                "rules": args.rules,
                "cart": args.cart,
                "zip": args.zip,
                "state": args.state,
                "previous": args.previous,
            }

        address = Address(zip=inputs["zip"], state=inputs["state"])
        run(inputs["rules"], inputs["cart"], address, inputs["previous"])

    except KeyboardInterrupt:
        print("\n\nCancelled.")
        sys.exit(1)
    except Exception as e:
        print(f"\nError: {e}")
        raise


if __name__ == "__main__":
    main()
