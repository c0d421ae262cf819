"""
Rule Documents

Builds ShippingRule records from the loosely typed documents the rule
administration stores. Documents written by older admin screens use other
field names; every known spelling is accepted here, once, so nothing
downstream has to guess.

FIELD ALIASES
-------------
    id                  id, rule_id
    name                name, nombre, zona
    active              active, activo
    coverage            coverage, zipcodes, zipCodes, zipcode
                        ("nacional" -> "national", "estado_X" -> "state_X",
                        comma-separated strings are split)
    free (always)       free_shipping_unconditional, free_shipping, envio_gratis
    free threshold      free_shipping_threshold, envio_gratis_monto_minimo,
                        monto_minimo_gratis, envio_variable.envio_gratis_monto_minimo
    base price          base_price, precio_base, precio
    weight tiers        weight_tiers, tiers, rangosPeso  ({min, max, price})
    package limits      package_limits / configuracion_paquetes:
                        max_weight_kg | peso_maximo_paquete,
                        max_items | maximo_productos_por_paquete,
                        cost_per_extra_kg | costo_por_kg_extra
    extra item cost     cost_per_extra_item, costo_por_producto_extra (rule,
                        package config, or envio_variable)
    delivery days       min_days | minDays | tiempo_minimo (same for max),
                        or the first opciones_mensajeria entry, whose
                        free-text tiempo_entrega ("1-3 días") is parsed

Missing limits, overflow cost and delivery days come from RuleDefaults.
"""

import json
import re
from decimal import Decimal, InvalidOperation
from pathlib import Path

from ..data.reference import DEFAULTS, NATIONAL_TOKEN, STATE_PREFIX, RuleDefaults
from ..errors import RuleDocumentError
from ..models import DeliveryEstimate, PackageLimits, Pricing, ShippingRule, WeightTier
from .validation import validate_rule


LEGACY_NATIONAL = "nacional"
LEGACY_STATE_PREFIX = "estado_"

_DAYS_RANGE = re.compile(r"(\d+)\s*(?:-|a|to)\s*(\d+)")
_DAYS_SINGLE = re.compile(r"(\d+)")


# =============================================================================
# FIELD HELPERS
# =============================================================================

def _first(doc: dict, *keys):
    """First present, non-empty value among keys."""
    for key in keys:
        value = doc.get(key)
        if value is not None and value != "":
            return value
    return None


def _decimal(value, field: str, rule_id: str) -> Decimal:
    if isinstance(value, bool):
        raise RuleDocumentError(f"Rule '{rule_id}': {field} must be numeric, got {value!r}")
    try:
        number = Decimal(str(value).strip())
    except (InvalidOperation, ValueError) as e:
        raise RuleDocumentError(f"Rule '{rule_id}': {field} must be numeric, got {value!r}") from e
    if not number.is_finite():
        raise RuleDocumentError(f"Rule '{rule_id}': {field} must be finite, got {value!r}")
    return number


def _int(value, field: str, rule_id: str) -> int:
    return int(_decimal(value, field, rule_id))


def _bool(value, default: bool = False) -> bool:
    if value is None:
        return default
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes", "si", "sí")
    return bool(value)


# =============================================================================
# COVERAGE
# =============================================================================

def normalize_token(token) -> str:
    """Map legacy spellings to canonical coverage tokens."""
    if isinstance(token, int) and not isinstance(token, bool):
        return str(token).zfill(5)
    text = str(token).strip()
    lowered = text.lower()
    if lowered in (LEGACY_NATIONAL, NATIONAL_TOKEN):
        return NATIONAL_TOKEN
    if lowered.startswith(LEGACY_STATE_PREFIX):
        return STATE_PREFIX + text[len(LEGACY_STATE_PREFIX):].strip().upper()
    if lowered.startswith(STATE_PREFIX):
        return STATE_PREFIX + text[len(STATE_PREFIX):].strip().upper()
    return text


def _coverage(doc: dict) -> frozenset[str]:
    raw = _first(doc, "coverage", "zipcodes", "zipCodes", "zipcode")
    if raw is None:
        return frozenset()
    if isinstance(raw, (str, int)):
        raw = [raw]

    tokens = []
    for entry in raw:
        if isinstance(entry, str):
            tokens.extend(part for part in entry.split(",") if part.strip())
        else:
            tokens.append(entry)
    return frozenset(normalize_token(t) for t in tokens)


# =============================================================================
# PRICING AND LIMITS
# =============================================================================

def _tiers(raw, rule_id: str) -> tuple[WeightTier, ...]:
    if not raw:
        return ()
    tiers = []
    for i, tier in enumerate(raw, start=1):
        if not isinstance(tier, dict):
            raise RuleDocumentError(f"Rule '{rule_id}': weight tier {i} must be a mapping")
        lower = _first(tier, "min", "min_kg", "minWeight", "peso_minimo")
        upper = _first(tier, "max", "max_kg", "maxWeight", "peso_maximo")
        price = _first(tier, "price", "precio")
        if lower is None or upper is None or price is None:
            raise RuleDocumentError(f"Rule '{rule_id}': weight tier {i} needs min, max and price")
        tiers.append(WeightTier(
            min_kg=float(_decimal(lower, f"tier {i} min", rule_id)),
            max_kg=float(_decimal(upper, f"tier {i} max", rule_id)),
            price=_decimal(price, f"tier {i} price", rule_id),
        ))
    return tuple(tiers)


def _package_config(doc: dict) -> dict:
    config = _first(doc, "package_limits", "configuracion_paquetes") or {}
    option = _messaging_option(doc)
    if not config and option is not None:
        config = option.get("configuracion_paquetes") or {}
    return config


def _messaging_option(doc: dict) -> dict | None:
    options = doc.get("opciones_mensajeria")
    if isinstance(options, list) and options and isinstance(options[0], dict):
        return options[0]
    return None


def _pricing(doc: dict, config: dict, free: bool, rule_id: str, defaults: RuleDefaults) -> Pricing:
    tiers = _tiers(_first(doc, "weight_tiers", "tiers", "rangosPeso"), rule_id)

    extra = _first(doc, "cost_per_extra_kg")
    if extra is None:
        extra = _first(config, "cost_per_extra_kg", "costo_por_kg_extra")
    cost_per_extra_kg = (
        _decimal(extra, "cost_per_extra_kg", rule_id) if extra is not None
        else Decimal(str(defaults.cost_per_extra_kg))
    )

    base = _first(doc, "base_price", "precio_base", "precio")
    option = _messaging_option(doc)
    if base is None and option is not None:
        base = _first(option, "precio", "price")

    if base is not None:
        base_price = _decimal(base, "base_price", rule_id)
    elif tiers or free:
        base_price = None if tiers else Decimal("0")
    else:
        raise RuleDocumentError(f"Rule '{rule_id}': no base price and no weight tiers")

    return Pricing(
        base_price=base_price,
        tiers=tiers,
        cost_per_extra_kg=cost_per_extra_kg,
        cost_per_extra_item=_extra_item_cost(doc, config, rule_id),
    )


def _extra_item_cost(doc: dict, config: dict, rule_id: str) -> Decimal:
    raw = _first(doc, "cost_per_extra_item", "costo_por_producto_extra")
    if raw is None:
        raw = _first(config, "cost_per_extra_item", "costo_por_producto_extra")
    variable = doc.get("envio_variable")
    if raw is None and isinstance(variable, dict) and _bool(variable.get("aplica"), default=True):
        raw = _first(variable, "costo_por_producto_extra")
    if raw is None:
        return Decimal("0")
    return _decimal(raw, "cost_per_extra_item", rule_id)


def _limits(doc: dict, config: dict, rule_id: str, defaults: RuleDefaults) -> PackageLimits:
    weight = _first(config, "max_weight_kg", "max_weight", "peso_maximo_paquete")
    if weight is None:
        weight = doc.get("peso_maximo")
    items = _first(config, "max_items", "maximo_productos_por_paquete")
    return PackageLimits(
        max_weight_kg=(
            float(_decimal(weight, "max_weight_kg", rule_id)) if weight is not None
            else defaults.max_weight_kg
        ),
        max_items=_int(items, "max_items", rule_id) if items is not None else defaults.max_items,
    )


def _threshold(doc: dict, rule_id: str) -> Decimal | None:
    raw = _first(
        doc, "free_shipping_threshold", "envio_gratis_monto_minimo", "monto_minimo_gratis",
    )
    variable = doc.get("envio_variable")
    if raw is None and isinstance(variable, dict) and _bool(variable.get("aplica"), default=True):
        raw = _first(variable, "envio_gratis_monto_minimo")
    if raw is None:
        return None
    threshold = _decimal(raw, "free_shipping_threshold", rule_id)
    # A zero threshold in stored documents means "not configured"
    return threshold if threshold > 0 else None


# =============================================================================
# DELIVERY
# =============================================================================

def parse_delivery_text(text: str) -> tuple[int | None, int | None]:
    """
    Parse free-text delivery times.

        "1-3 días"   -> (1, 3)
        "2 a 5 días" -> (2, 5)
        "3 días"     -> (3, 3)
        "pronto"     -> (None, None)
    """
    if not text:
        return None, None
    match = _DAYS_RANGE.search(text)
    if match:
        return int(match.group(1)), int(match.group(2))
    match = _DAYS_SINGLE.search(text)
    if match:
        days = int(match.group(1))
        return days, days
    return None, None


def _delivery(doc: dict, rule_id: str, defaults: RuleDefaults) -> DeliveryEstimate:
    source = doc.get("delivery_estimate") if isinstance(doc.get("delivery_estimate"), dict) else doc
    min_days = _first(source, "min_days", "minDays", "tiempo_minimo")
    max_days = _first(source, "max_days", "maxDays", "tiempo_maximo")

    option = _messaging_option(doc)
    if option is not None:
        option_min = _first(option, "min_days", "minDays", "tiempo_minimo")
        option_max = _first(option, "max_days", "maxDays", "tiempo_maximo")
        min_days = option_min if option_min is not None else min_days
        max_days = option_max if option_max is not None else max_days
        if min_days is None or max_days is None:
            text_min, text_max = parse_delivery_text(option.get("tiempo_entrega") or "")
            min_days = min_days if min_days is not None else text_min
            max_days = max_days if max_days is not None else text_max

    min_days = _int(min_days, "min_days", rule_id) if min_days is not None else defaults.min_days
    max_days = _int(max_days, "max_days", rule_id) if max_days is not None else max(defaults.max_days, min_days)
    return DeliveryEstimate(min_days=min_days, max_days=max(max_days, min_days))


# =============================================================================
# MAIN ENTRY POINTS
# =============================================================================

def rule_from_document(
    doc: dict,
    defaults: RuleDefaults = DEFAULTS,
    strict: bool = False,
) -> ShippingRule:
    """
    Build a ShippingRule from a stored rule document.

    Args:
        doc: Rule document (see module docstring for accepted fields)
        defaults: Fallback limits, overflow cost and delivery days
        strict: Also run validate_rule() (admin-time); the resolver leaves
            this off so a broken rule degrades instead of failing checkout

    Raises:
        RuleDocumentError: Missing id, missing price data, non-numeric values
        ConfigurationError: strict=True and the rule fails validation
    """
    if not isinstance(doc, dict):
        raise RuleDocumentError(f"Rule document must be a mapping, got {type(doc).__name__}")

    rule_id = _first(doc, "id", "rule_id")
    if rule_id is None:
        raise RuleDocumentError("Rule document has no id")
    rule_id = str(rule_id)

    free = _bool(_first(doc, "free_shipping_unconditional", "free_shipping", "envio_gratis"))
    config = _package_config(doc)

    rule = ShippingRule(
        id=rule_id,
        name=str(_first(doc, "name", "nombre", "zona") or rule_id),
        coverage=_coverage(doc),
        package_limits=_limits(doc, config, rule_id, defaults),
        pricing=_pricing(doc, config, free, rule_id, defaults),
        delivery_estimate=_delivery(doc, rule_id, defaults),
        active=_bool(_first(doc, "active", "activo"), default=True),
        free_shipping_unconditional=free,
        free_shipping_threshold=_threshold(doc, rule_id),
    )

    if strict:
        validate_rule(rule)
    return rule


def rules_from_documents(
    docs: list[dict],
    defaults: RuleDefaults = DEFAULTS,
    strict: bool = False,
) -> list[ShippingRule]:
    """Build rules for a list of documents, preserving order."""
    return [rule_from_document(doc, defaults, strict) for doc in docs]


def load_rules(
    path: Path | str,
    defaults: RuleDefaults = DEFAULTS,
    strict: bool = False,
) -> list[ShippingRule]:
    """
    Load rules from a JSON file holding a list of rule documents
    (or an object with a "rules" list).
    """
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if isinstance(data, dict):
        data = data.get("rules", [])
    return rules_from_documents(data, defaults, strict)
