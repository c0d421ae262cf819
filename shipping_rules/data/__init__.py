"""
Shipping Rules Data

Reference data and loaders for carts.

Structure:
    - reference/: Static reference data (states, zip prefixes, defaults)

Rule documents are loaded with shipping_rules.rules.load_rules().
"""

from decimal import Decimal
from pathlib import Path

import polars as pl

from ..models import CartItem, Product
from .reference import (
    RuleDefaults,
    DEFAULTS,
    STATE_ABBREVIATIONS,
    ZIP_PREFIXES,
    STATE_PREFIX,
    NATIONAL_TOKEN,
    state_abbreviation,
    state_from_zip,
)


RULE_ID_SEPARATOR = "|"

CART_SCHEMA = {
    "product_id": pl.Utf8,
    "name": pl.Utf8,
    "weight_kg": pl.Float64,
    "price": pl.Utf8,        # Exact decimal text, no float rounding
    "rule_ids": pl.Utf8,
    "quantity": pl.Int64,
}


def load_cart_frame(path: Path | str) -> pl.DataFrame:
    """
    Load a cart CSV.

    Columns:
        - product_id: Product id (kept as string)
        - name: Display name (optional)
        - weight_kg: Unit weight in kg
        - price: Unit price (kept as string, parsed to Decimal)
        - rule_ids: Assigned rule ids, "|"-separated (empty = unshippable)
        - quantity: Units in the cart

    Returns:
        DataFrame with one row per cart line
    """
    # Read everything as text, then cast the columns present
    df = pl.read_csv(path, infer_schema_length=0)
    df = df.with_columns([
        pl.col(name).str.strip_chars().cast(dtype)
        for name, dtype in CART_SCHEMA.items() if name in df.columns
    ])
    if "name" not in df.columns:
        df = df.with_columns(pl.lit(None, dtype=pl.Utf8).alias("name"))
    if "quantity" not in df.columns:
        df = df.with_columns(pl.lit(1, dtype=pl.Int64).alias("quantity"))
    return df.with_columns(
        pl.col("rule_ids").fill_null(""),
        pl.col("quantity").fill_null(1),
    )


def load_cart(path: Path | str) -> list[CartItem]:
    """Load a cart CSV into CartItems (see load_cart_frame for columns)."""
    return cart_from_frame(load_cart_frame(path))


def cart_from_frame(df: pl.DataFrame) -> list[CartItem]:
    items = []
    for row in df.iter_rows(named=True):
        rule_ids = frozenset(
            r.strip() for r in row["rule_ids"].split(RULE_ID_SEPARATOR) if r.strip()
        )
        product = Product(
            id=row["product_id"],
            weight=row["weight_kg"],
            price=Decimal(row["price"].strip()),
            rule_ids=rule_ids,
            name=row["name"],
        )
        items.append(CartItem(product=product, quantity=row["quantity"]))
    return items


__all__ = [
    # Cart loaders
    "load_cart",
    "load_cart_frame",
    "cart_from_frame",
    "RULE_ID_SEPARATOR",
    # Reference data
    "RuleDefaults",
    "DEFAULTS",
    "STATE_ABBREVIATIONS",
    "ZIP_PREFIXES",
    "STATE_PREFIX",
    "NATIONAL_TOKEN",
    "state_abbreviation",
    "state_from_zip",
]
