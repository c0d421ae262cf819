"""
State Reference Table

Mexican states: display name -> abbreviation used in coverage tokens
("state_PUE"), and two-digit postal prefixes per state for addresses that
arrive without a usable state name.

Names are matched after stripping accents and case, so "Querétaro",
"queretaro" and "QUERÉTARO" all resolve to QUE.
"""

import unicodedata


STATE_PREFIX = "state_"
NATIONAL_TOKEN = "national"


# =============================================================================
# NAME -> ABBREVIATION
# =============================================================================

STATE_ABBREVIATIONS = {
    "Aguascalientes": "AGU",
    "Baja California": "BCN",
    "Baja California Norte": "BCN",
    "Baja California Sur": "BCS",
    "Campeche": "CAM",
    "Chiapas": "CHP",
    "Chihuahua": "CHH",
    "Ciudad de México": "CMX",
    "CDMX": "CMX",
    "Distrito Federal": "CMX",
    "Coahuila": "COA",
    "Coahuila de Zaragoza": "COA",
    "Colima": "COL",
    "Durango": "DUR",
    "Estado de México": "MEX",
    "México": "MEX",
    "Guanajuato": "GUA",
    "Guerrero": "GRO",
    "Hidalgo": "HID",
    "Jalisco": "JAL",
    "Michoacán": "MIC",
    "Michoacán de Ocampo": "MIC",
    "Morelos": "MOR",
    "Nayarit": "NAY",
    "Nuevo León": "NLE",
    "Oaxaca": "OAX",
    "Puebla": "PUE",
    "Querétaro": "QUE",
    "Quintana Roo": "ROO",
    "San Luis Potosí": "SLP",
    "Sinaloa": "SIN",
    "Sonora": "SON",
    "Tabasco": "TAB",
    "Tamaulipas": "TAM",
    "Tlaxcala": "TLA",
    "Veracruz": "VER",
    "Veracruz de Ignacio de la Llave": "VER",
    "Yucatán": "YUC",
    "Zacatecas": "ZAC",
}


# =============================================================================
# ABBREVIATION -> POSTAL PREFIXES
# =============================================================================

ZIP_PREFIXES = {
    "AGU": ["20"],
    "BCN": ["21", "22"],
    "BCS": ["23"],
    "CAM": ["24"],
    "CHP": ["29", "30"],
    "CHH": ["31", "32", "33"],
    "CMX": ["01", "02", "03", "04", "05", "06", "07", "08",
            "09", "10", "11", "12", "13", "14", "15", "16"],
    "COA": ["25", "26", "27"],
    "COL": ["28"],
    "DUR": ["34", "35"],
    "GUA": ["36", "37", "38"],
    "GRO": ["39", "40", "41"],
    "HID": ["42", "43"],
    "JAL": ["44", "45", "46", "47", "48", "49"],
    "MEX": ["50", "51", "52", "53", "54", "55", "56", "57"],
    "MIC": ["58", "59", "60", "61"],
    "MOR": ["62"],
    "NAY": ["63"],
    "NLE": ["64", "65", "66", "67"],
    "OAX": ["68", "69", "70", "71"],
    "PUE": ["72", "73", "74", "75"],
    "QUE": ["76"],
    "ROO": ["77"],
    "SLP": ["78", "79"],
    "SIN": ["80", "81", "82"],
    "SON": ["83", "84", "85"],
    "TAB": ["86"],
    "TAM": ["87", "88", "89"],
    "TLA": ["90"],
    "VER": ["91", "92", "93", "94", "95", "96"],
    "YUC": ["97"],
    "ZAC": ["98", "99"],
}


# =============================================================================
# HELPERS
# =============================================================================

def _fold(name: str) -> str:
    """Strip accents, surrounding whitespace and case."""
    decomposed = unicodedata.normalize("NFKD", name.strip())
    return "".join(c for c in decomposed if not unicodedata.combining(c)).casefold()


_FOLDED_ABBREVIATIONS = {_fold(name): abbr for name, abbr in STATE_ABBREVIATIONS.items()}
_PREFIX_TO_STATE = {
    prefix: abbr for abbr, prefixes in ZIP_PREFIXES.items() for prefix in prefixes
}


def state_abbreviation(state_name: str | None) -> str | None:
    """
    Translate a state name to its abbreviation.

    A value that already is an abbreviation ("PUE") is accepted as-is.
    Returns None for unknown or empty names.
    """
    if not state_name or not state_name.strip():
        return None
    folded = _fold(state_name)
    if folded in _FOLDED_ABBREVIATIONS:
        return _FOLDED_ABBREVIATIONS[folded]
    upper = state_name.strip().upper()
    if upper in ZIP_PREFIXES:
        return upper
    return None


def state_from_zip(zip_code: str | None) -> str | None:
    """Derive the state abbreviation from the first two digits of a zip."""
    if not zip_code:
        return None
    zip_code = zip_code.strip()
    if len(zip_code) < 2 or not zip_code[:2].isdigit():
        return None
    return _PREFIX_TO_STATE.get(zip_code[:2])
