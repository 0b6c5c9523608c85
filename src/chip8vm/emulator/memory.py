"""
Memory Subsystem for CHIP-8 VM
==============================

Flat, bounds-checked byte store shared by the CPU, the stack and the host.

Memory Map (conventional, not enforced):
    $000-$04F  Font sprites (16 digits x 5 bytes)
    $050-$1FF  Interpreter space; the call stack grows down from $200
    $200-$FFF  Program space (ROMs load at $200)

Every access is checked against [0, 4096). Out-of-range accesses raise
AddressOutOfRangeError and never wrap or truncate. Multi-byte values are
big-endian: the byte at the lower address is the most significant.

Copyright (c) 2025-2026 Hugo José Pinto & Contributors
"""

from typing import Optional

from ..errors import AddressOutOfRangeError


MEMORY_SIZE = 0x1000


class Memory:
    """
    4KB flat memory.

    Attributes:
        size: Number of addressable bytes (always 4096)

    Example:
        >>> mem = Memory()
        >>> mem.write_word(0x200, 0x00E0)
        >>> mem.read_byte(0x201)
        224
    """

    def __init__(self, size: int = MEMORY_SIZE):
        self.size = size
        self._data = bytearray(size)

    # ========================================
    # Bounds checking
    # ========================================

    def _check(self, address: int, length: int = 1) -> None:
        """Raise AddressOutOfRangeError unless [address, address+length) fits."""
        if length < 0:
            raise ValueError(f"Length must be non-negative, got {length}")
        if address < 0 or address + length > self.size:
            raise AddressOutOfRangeError(address, length)

    # ========================================
    # Byte and word access
    # ========================================

    def read_byte(self, address: int) -> int:
        """
        Read byte from memory.

        Args:
            address: Address in [0, 4096)

        Returns:
            Byte value at address

        Raises:
            AddressOutOfRangeError: If address is outside memory
        """
        self._check(address)
        return self._data[address]

    def write_byte(self, address: int, value: int) -> None:
        """
        Write byte to memory.

        Args:
            address: Address in [0, 4096)
            value: Byte value (0-255)

        Raises:
            AddressOutOfRangeError: If address is outside memory
            ValueError: If value is not a byte
        """
        if not 0 <= value <= 0xFF:
            raise ValueError(f"Byte value must be 0-255, got {value}")
        self._check(address)
        self._data[address] = value

    def read_word(self, address: int) -> int:
        """Read 16-bit word (big-endian). Both bytes must be in range."""
        self._check(address, 2)
        return (self._data[address] << 8) | self._data[address + 1]

    def write_word(self, address: int, value: int) -> None:
        """Write 16-bit word (big-endian). Both bytes must be in range."""
        if not 0 <= value <= 0xFFFF:
            raise ValueError(f"Word value must be 0-65535, got {value}")
        self._check(address, 2)
        self._data[address] = (value >> 8) & 0xFF
        self._data[address + 1] = value & 0xFF

    # ========================================
    # Block transfers
    # ========================================

    def read_bytes(self, address: int, length: int) -> bytes:
        """
        Read a block of memory.

        Args:
            address: Starting address
            length: Number of bytes to read

        Returns:
            Bytes object with the data

        Raises:
            AddressOutOfRangeError: If any byte of the block is outside memory
        """
        self._check(address, length)
        return bytes(self._data[address:address + length])

    def write_bytes(self, address: int, data: bytes) -> None:
        """
        Write a block of memory.

        The whole block is validated before anything is stored, so a failing
        write leaves memory untouched.

        Args:
            address: Starting address
            data: Bytes (or list of byte values) to write

        Raises:
            AddressOutOfRangeError: If any byte of the block is outside memory
        """
        data = bytes(data)
        self._check(address, len(data))
        self._data[address:address + len(data)] = data

    # ========================================
    # Inspection
    # ========================================

    def snapshot(self) -> bytes:
        """Return a read-only copy of the whole address space."""
        return bytes(self._data)

    def clear(self) -> None:
        """Zero-fill all memory."""
        self._data[:] = bytes(self.size)

    def hexdump(self, address: int = 0, length: Optional[int] = None) -> str:
        """
        Format a region of memory as a hex/ASCII listing.

        Lines cover 16 bytes each:
            $0000: F0 90 90 90 F0 20 60 20 20 70 F0 10 F0 80 F0 F0  ...... `  p....

        Args:
            address: Starting address (default 0)
            length: Number of bytes (default: to the end of memory)

        Returns:
            The listing, one line per 16 bytes
        """
        if length is None:
            length = self.size - address
        data = self.read_bytes(address, length)

        lines = []
        for i in range(0, len(data), 16):
            chunk = data[i:i + 16]
            hex_str = " ".join(f"{b:02X}" for b in chunk)
            ascii_str = "".join(
                chr(b) if 0x20 <= b < 0x7F else "."
                for b in chunk
            )
            lines.append(f"${address + i:04X}: {hex_str:<47}  {ascii_str}")
        return "\n".join(lines)

    def __len__(self) -> int:
        return self.size
