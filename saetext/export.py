"""
Extract the strings referenced by the pointer tables to a sidecar file.
"""
import logging
from typing import Iterator, Optional

from .address_table import AddressTable, SLOT_SIZE
from .binary_file import BinaryFile
from .common import read_string_at
from .sidecar import StringRecord, sidecar_path, write_sidecar

logger = logging.getLogger(__name__)


def iter_string_records(bfile: BinaryFile, table: AddressTable) -> Iterator[StringRecord]:
    """
    Walk every pointer table and yield the string behind each slot.

    Slots are read sequentially; strings are read elsewhere in the file and
    the scan resumes where it left off.

    :param bfile: Image opened for reading
    :param table: Image layout
    """
    for address_range in table.ranges:
        bfile.seek(table.to_physical(address_range.start))
        for address in address_range.slots():
            pointer = bfile.read_int()
            # Second half of the slot is not text related
            bfile.read_exact(SLOT_SIZE - 4)
            text = read_string_at(
                bfile, table.to_physical(pointer), context=f"slot {address:X}"
            )
            yield StringRecord(address, text)


def extract_strings(bfile: BinaryFile, table: AddressTable) -> list[StringRecord]:
    """Read all records at once, in table order."""
    return list(iter_string_records(bfile, table))


def extract_to_sidecar(
    image_path: str,
    table: AddressTable,
    output_file: Optional[str] = None,
) -> int:
    """
    Extract every string of an image to its sidecar file.

    :param image_path: Image to read, never modified
    :param table: Image layout
    :param output_file: Sidecar path, defaults to ``<image_path>.sae``
    :return: Number of lines written
    """
    if output_file is None:
        output_file = sidecar_path(image_path)
    with BinaryFile(image_path) as bfile:
        lines = write_sidecar(iter_string_records(bfile, table), output_file)
    logger.info("Extracted %d lines to %s", lines, output_file)
    return lines
