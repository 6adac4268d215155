"""
Register file definitions and name mappings.

The machine has 128 general registers r0-r127. The top three are reserved
and can also be named by mnemonic: ip (instruction pointer), sp (stack
pointer) and flgs (flags).
"""

REG_COUNT = 128

REG_IP = 125
REG_SP = 126
REG_FLAGS = 127

# Reserved register names, matched exactly
RESERVED_NAMES = {
    "ip": REG_IP,
    "sp": REG_SP,
    "flgs": REG_FLAGS,
}

RESERVED_BY_NUMBER = {num: name for name, num in RESERVED_NAMES.items()}


def parse_register(name: str) -> int:
    """
    Parse a register name and return its index.

    Args:
        name: Register name ("r0".."r127", "ip", "sp", "flgs")

    Returns:
        Register index (0-127)

    Raises:
        ValueError: If the register name is invalid
    """
    if name in RESERVED_NAMES:
        return RESERVED_NAMES[name]

    digits = name[1:]
    if not name.startswith("r") or not digits.isascii() or not digits.isdigit():
        raise ValueError(f"Invalid register name: {name}")

    num = int(digits, 10)
    if not 0 <= num < REG_COUNT:
        raise ValueError(f"Register index out of range (0-{REG_COUNT - 1}): {name}")
    return num


def is_valid_register(name: str) -> bool:
    """Check if a string is a valid register name."""
    try:
        parse_register(name)
    except ValueError:
        return False
    return True


def get_register_name(num: int, use_reserved: bool = True) -> str:
    """
    Get the name for a register index.

    Args:
        num: Register index (0-127)
        use_reserved: If True, return ip/sp/flgs for the reserved registers

    Returns:
        Register name string
    """
    if not 0 <= num < REG_COUNT:
        raise ValueError(f"Invalid register number: {num}")
    if use_reserved and num in RESERVED_BY_NUMBER:
        return RESERVED_BY_NUMBER[num]
    return f"r{num}"
