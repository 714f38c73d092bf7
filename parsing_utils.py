"""
Parsing utilities for MtgProxyBuilder.
"""

import re
from typing import List, Optional, NamedTuple, Tuple

from config import DIMENSION_UNITS_TO_MM

# Data structure for a parsed card list line
class ParsedEntry(NamedTuple):
    quantity: int
    name: str
    set_code: Optional[str]
    original_line: str

# "4 Lightning Bolt [2XM]", "Lightning Bolt [2XM]", "4 Lightning Bolt", "Lightning Bolt"
CARD_LINE_RE = re.compile(
    # 1. Optional leading count
    r"^(?P<count>\d+)?\s*"
    # 2. Card name (non-greedy, may end up empty)
    r"(?P<name>.*?)"
    # 3. Optional bracketed set code at the very end
    r"(?:\s*\[(?P<set>\w+)\])?"
    r"\s*$"
)

def parse_card_line(line: str) -> Optional[ParsedEntry]:
    """
    Parses one card list line. Returns None for anything without a usable name;
    such lines are dropped, never reported.
    """
    match = CARD_LINE_RE.match(line.strip())
    if not match:
        return None
    data = match.groupdict()
    name = (data['name'] or "").strip()
    if not name:
        return None
    # A count of 0 is treated like a missing count
    quantity = int(data['count']) if data.get('count') else 0
    return ParsedEntry(
        quantity=quantity or 1,
        name=name,
        set_code=data['set'].upper() if data.get('set') else None,
        original_line=line
    )

def parse_card_list(text: str, debug: bool = False) -> List[ParsedEntry]:
    """Turns raw multi-line text into ordered entries, skipping blank and unparseable lines."""
    entries: List[ParsedEntry] = []
    for line_num, line in enumerate(text.splitlines(), 1):
        if not line.strip():
            continue
        entry = parse_card_line(line)
        if entry is None:
            if debug: print(f"DEBUG: Skipping line {line_num} without a card name: '{line}'")
            continue
        entries.append(entry)
    return entries

def parse_variant_override(value: str) -> Tuple[str, str, Optional[str]]:
    """
    Parses a variant override like 'Lightning Bolt:2XM' or 'Lightning Bolt:2XM:117'.
    Returns (card_name, set_code, collector_number).
    """
    parts = value.split(':')
    if len(parts) < 2 or len(parts) > 3 or not parts[0].strip() or not parts[1].strip():
        raise ValueError(f"Invalid variant format: '{value}'. Expected '<Card Name>:<SET>[:<NUM>]'.")
    collector_number = parts[2].strip() if len(parts) == 3 and parts[2].strip() else None
    return parts[0].strip(), parts[1].strip().upper(), collector_number

def parse_dimension_to_mm(dim_str: str) -> float:
    dim_str = dim_str.lower().strip(); val_str = ""; unit_str = ""
    for char in dim_str:
        if char.isdigit() or char == '.': val_str += char
        else: unit_str += char
    unit_str = unit_str.strip()
    if not val_str: raise ValueError(f"No numeric value in dimension: '{dim_str}'")
    try: value = float(val_str)
    except ValueError: raise ValueError(f"Invalid numeric value in dimension: '{dim_str}'")
    if not unit_str: return value
    if unit_str not in DIMENSION_UNITS_TO_MM:
        raise ValueError(f"Unknown unit '{unit_str}' in '{dim_str}'. Use mm, in, pt.")
    return value * DIMENSION_UNITS_TO_MM[unit_str]

HEX_COLOR_RE = re.compile(r"^#?(?P<hex>[0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")

def parse_hex_color(color_str: str) -> Tuple[int, int, int]:
    match = HEX_COLOR_RE.match(color_str.strip())
    if not match:
        raise ValueError(f"Invalid colour: '{color_str}'. Use #rrggbb or #rgb.")
    hex_digits = match.group('hex')
    if len(hex_digits) == 3:
        hex_digits = "".join(c * 2 for c in hex_digits)
    return int(hex_digits[0:2], 16), int(hex_digits[2:4], 16), int(hex_digits[4:6], 16)

def format_hex_color(rgb: Tuple[int, int, int]) -> str:
    return "#{:02x}{:02x}{:02x}".format(*rgb)
