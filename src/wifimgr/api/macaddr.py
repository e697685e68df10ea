"""MAC address validation and wire-format normalization.

The inventory API identifies devices by MAC in lowercase hex with no
separators. Users type MACs in whichever style their tooling printed:

    "00:11:22:33:44:55" -> "001122334455"
    "00-11-22-33-44-55" -> "001122334455"
    "0011.2233.4455"    -> "001122334455"
    "001122334455"      -> "001122334455"
"""

import re

MAC_PATTERN = re.compile(
    r"^([0-9A-Fa-f]{2}:){5}[0-9A-Fa-f]{2}$|"  # XX:XX:XX:XX:XX:XX
    r"^([0-9A-Fa-f]{2}-){5}[0-9A-Fa-f]{2}$|"  # XX-XX-XX-XX-XX-XX
    r"^([0-9A-Fa-f]{4}\.){2}[0-9A-Fa-f]{4}$|"  # XXXX.XXXX.XXXX
    r"^[0-9A-Fa-f]{12}$"  # XXXXXXXXXXXX
)

_SEPARATORS = re.compile(r"[:\-.\s]")


def is_valid(mac: str) -> bool:
    """Check whether a string is a MAC address in one of the accepted styles."""
    return bool(MAC_PATTERN.match(mac.strip()))


def normalize(mac: str) -> str:
    """Convert a MAC address to the wire format (lowercase, no separators).

    Raises:
        ValueError: If the value is not a MAC address
    """
    if not is_valid(mac):
        raise ValueError(f"invalid MAC address '{mac}'")
    return _SEPARATORS.sub("", mac.strip()).lower()
