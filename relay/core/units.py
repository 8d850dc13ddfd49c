from decimal import Decimal, InvalidOperation, ROUND_DOWN
import re

from eth_utils import is_checksum_address as eth_is_checksum
from eth_utils import to_checksum_address


ETH_DECIMALS = 18

WEI_PER_ETH = 10 ** ETH_DECIMALS

_re_eth = re.compile(r"^0x[a-fA-F0-9]{40}$")


def is_eth(addr: str) -> bool:
    if not _re_eth.match(addr or ""):
        return False
    if addr[2:] == addr[2:].lower() or addr[2:] == addr[2:].upper() or eth_is_checksum(addr):
        return True
    return False


def normalize_address(addr: str) -> str:
    """Return ``addr`` in EIP-55 checksum form, or raise ``ValueError``."""
    addr = (addr or "").strip()
    if not is_eth(addr):
        raise ValueError(f"Invalid destination address: {addr!r}")
    return to_checksum_address(addr)


def parse_amount(value) -> Decimal | None:
    """Parse a human amount, returning ``None`` for anything not a positive number."""
    if value is None or isinstance(value, bool):
        return None
    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None
    if not amount.is_finite() or amount <= 0:
        return None
    return amount


def to_wei(amount_human: Decimal) -> int:
    # sub-wei precision is truncated, never rounded up past the balance
    scaled = Decimal(amount_human) * WEI_PER_ETH
    return int(scaled.to_integral_value(rounding=ROUND_DOWN))


def from_wei(amount_wei: int) -> Decimal:
    return Decimal(int(amount_wei)) / Decimal(WEI_PER_ETH)


def format_ether(amount_wei: int) -> str:
    """Format wei as an ether string without trailing zeros (``"1.5"``, ``"0.0"``)."""
    text = format(from_wei(amount_wei).normalize(), "f")
    if "." not in text:
        text += ".0"
    return text


def format_fixed(amount_wei: int, places: int = 6) -> str:
    quantum = Decimal(1).scaleb(-places)
    return str(from_wei(amount_wei).quantize(quantum, rounding=ROUND_DOWN))
