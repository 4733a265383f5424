"""
Write edited strings back into an image.

Every string is relocated into the free region, one after the other, and each
slot pointer is rewritten to the new location. Nothing is written until the
whole sidecar has been checked for size and slot coverage.
"""
import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from .address_table import ALIGNMENT, AddressTable
from .binary_file import BinaryFile
from .common import encode_game_string
from .sidecar import read_sidecar, sidecar_path

logger = logging.getLogger(__name__)


class InsufficientSpaceError(ValueError):
    """Raised when the strings do not fit in the free region."""

    def __init__(self, required: int, available: int):
        super().__init__(
            f"Too much text, not enough free space: {required} bytes required, "
            f"{available} available"
        )
        self.required = required
        self.available = available


class MissingSlotError(ValueError):
    """Raised when the sidecar has no text for some slots."""

    def __init__(self, addresses: list[int]):
        shown = ", ".join(f"{a:X}" for a in addresses[:5])
        if len(addresses) > 5:
            shown += f" and {len(addresses) - 5} more"
        super().__init__(f"String at offset {shown} is missing!")
        self.addresses = addresses


@dataclass(frozen=True)
class CapacityReport:
    """Bytes a patch needs against what the free region offers."""
    required: int
    available: int

    @property
    def fits(self) -> bool:
        return self.required <= self.available

    @property
    def headroom(self) -> int:
        return self.available - self.required


@dataclass(frozen=True)
class PatchResult:
    """Outcome of a successful patch."""
    slots_written: int
    end_address: int  # first unused virtual address of the free region
    headroom: int


class AllocationCursor:
    """Next free file offset in the free region, kept 4-byte aligned."""

    def __init__(self, offset: int):
        if offset % ALIGNMENT:
            raise ValueError(f"Cursor 0x{offset:x} is not {ALIGNMENT}-byte aligned")
        self.offset = offset

    def advance(self, num_bytes: int) -> None:
        self.offset += num_bytes


def allocation_size(encoded_length: int) -> int:
    """
    Bytes taken in the free region by a string of encoded_length bytes.

    Counts the null terminator and the padding to the next 4-byte boundary.
    """
    size = encoded_length + 1
    remainder = size % ALIGNMENT
    if remainder:
        size += ALIGNMENT - remainder
    return size


def calculate_required_size(texts: Iterable[str]) -> int:
    """
    Total bytes needed to store every text in the free region.

    Does not touch any file.

    :raises EncodingError: If a text cannot be encoded
    """
    size = 0
    for text in texts:
        assert size % ALIGNMENT == 0
        size += allocation_size(len(encode_game_string(text)))
    return size


def check_capacity(strings: dict[int, str], table: AddressTable) -> CapacityReport:
    """Compare the size of all sidecar strings with the free region."""
    report = CapacityReport(
        required=calculate_required_size(strings.values()),
        available=table.free_region.capacity,
    )
    logger.info(
        "%d bytes required, %d bytes available", report.required, report.available
    )
    return report


def find_missing_slots(strings: dict[int, str], table: AddressTable) -> list[int]:
    """Slot addresses, in table order, that have no text."""
    return [address for address in table.iter_slots() if address not in strings]


def write_string(
    bfile: BinaryFile, cursor: AllocationCursor, text: str, context: str = ""
) -> int:
    """
    Write a null-terminated string at the cursor and pad to alignment.

    :param bfile: Image opened for writing
    :param cursor: Allocation cursor, advanced past the string and its padding
    :param text: Text to write
    :param context: Location to mention in error messages
    :return: File offset the string was written at
    """
    offset = cursor.offset
    data = encode_game_string(text, context=context) + b"\x00"
    padding = allocation_size(len(data) - 1) - len(data)
    bfile.seek(offset)
    bfile.write(data + b"\x00" * padding)
    cursor.advance(len(data) + padding)
    return offset


def patch_strings(
    bfile: BinaryFile, strings: dict[int, str], table: AddressTable
) -> PatchResult:
    """
    Relocate every string to the free region and update the slot pointers.

    :param bfile: Image opened for writing
    :param strings: Text for each slot address
    :param table: Image layout
    :raises InsufficientSpaceError: If the strings do not fit, before any write
    :raises MissingSlotError: If a slot has no text, before any write
    """
    capacity = check_capacity(strings, table)
    if not capacity.fits:
        raise InsufficientSpaceError(capacity.required, capacity.available)

    missing = find_missing_slots(strings, table)
    if missing:
        raise MissingSlotError(missing)

    unknown = set(strings).difference(table.iter_slots())
    if unknown:
        logger.warning(
            "Ignoring %d lines with addresses outside the pointer tables",
            len(unknown),
        )

    region = table.free_region
    bfile.validate_region(
        table.to_physical(region.start), table.to_physical(region.end), "free region"
    )

    cursor = AllocationCursor(table.to_physical(region.start))
    slots_written = 0
    for address in table.iter_slots():
        string_offset = write_string(
            bfile, cursor, strings[address], context=f"slot {address:X}"
        )
        bfile.seek(table.to_physical(address))
        bfile.write_int(table.to_virtual(string_offset))
        slots_written += 1

    end_address = table.to_virtual(cursor.offset)
    logger.info("Text space pointer ended up at %X", end_address)
    return PatchResult(
        slots_written=slots_written,
        end_address=end_address,
        headroom=region.end - end_address,
    )


def patch_from_sidecar(
    image_path: str,
    table: AddressTable,
    input_file: Optional[str] = None,
) -> PatchResult:
    """
    Patch an image in place with the content of its sidecar file.

    :param image_path: Image to modify
    :param table: Image layout
    :param input_file: Sidecar path, defaults to ``<image_path>.sae``
    """
    if input_file is None:
        input_file = sidecar_path(image_path)
    strings = read_sidecar(input_file)
    with BinaryFile(image_path, "r+b") as bfile:
        return patch_strings(bfile, strings, table)
