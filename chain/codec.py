"""
Conversions between text and wire forms of addresses and amounts.

Addresses travel as 20 raw bytes inside the service and are rendered as
lower-case ``0x`` hex. Amounts are plain Python ints and are rendered as
decimal strings so that nothing downstream ever sees a float.
"""
import re

from eth_utils import to_checksum_address

from core.exceptions import InvalidFormatException

ADDRESS_LENGTH = 20
WORD_SIZE = 32

_ADDRESS_RE = re.compile(r"0x[0-9a-fA-F]{40}")
_AMOUNT_RE = re.compile(r"[0-9]+")


def parse_address(value: str) -> bytes:
    """
    Parse a ``0x``-prefixed hex address.

    Parameters
    ----------
    value : str
        Address text, any letter case

    Returns
    -------
    bytes
        20-byte address

    Raises
    ------
    InvalidFormatException
        If the value is not ``0x`` followed by exactly 40 hex characters
    """
    if not isinstance(value, str) or not _ADDRESS_RE.fullmatch(value):
        raise InvalidFormatException(f"Invalid address: {value!r}")
    return bytes.fromhex(value[2:])


def format_address(address: bytes) -> str:
    """
    Render an address as lower-case ``0x`` hex.

    Parameters
    ----------
    address : bytes
        20-byte address

    Returns
    -------
    str
        ``0x`` followed by 40 lower-case hex characters
    """
    if len(address) != ADDRESS_LENGTH:
        raise InvalidFormatException(f"Address must be {ADDRESS_LENGTH} bytes, got {len(address)}")
    return "0x" + bytes(address).hex()


def to_checksum(address: bytes) -> str:
    """EIP-55 form, only for handing addresses to web3."""
    return to_checksum_address(format_address(address))


def parse_amount(value: str) -> int:
    """
    Parse a non-negative decimal amount of any size.

    Parameters
    ----------
    value : str
        Decimal digits only

    Returns
    -------
    int
        Parsed amount

    Raises
    ------
    InvalidFormatException
        If the value is empty or holds anything but ASCII digits
    """
    if not isinstance(value, str) or not _AMOUNT_RE.fullmatch(value):
        raise InvalidFormatException(f"Invalid amount: {value!r}")
    return int(value)


def format_amount(amount: int) -> str:
    """
    Render an amount as canonical decimal.

    Parameters
    ----------
    amount : int
        Non-negative amount

    Returns
    -------
    str
        Decimal string without leading zeros, ``"0"`` for zero
    """
    if amount < 0:
        raise InvalidFormatException(f"Amount must be non-negative, got {amount}")
    return str(amount)


def word_to_int(word: bytes) -> int:
    """Big-endian unsigned value of a 32-byte slot."""
    return int.from_bytes(word, "big")


def word_to_address(word: bytes) -> bytes:
    """Low 20 bytes of a 32-byte slot."""
    if len(word) != WORD_SIZE:
        raise InvalidFormatException(f"Expected {WORD_SIZE}-byte word, got {len(word)}")
    return bytes(word[WORD_SIZE - ADDRESS_LENGTH:])
