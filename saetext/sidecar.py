"""
Read and write the .sae sidecar file.

One line per slot: ``<address>,<text>`` with the address in uppercase
hexadecimal and line breaks in the text written as a literal ``\\n``.
"""
import logging
import re
from typing import Iterable, NamedTuple

logger = logging.getLogger(__name__)

SIDECAR_EXTENSION = ".sae"
LINE_BREAK_ESCAPE = "\\n"
# No "0x" prefix, sign, whitespace or underscores
HEX_ADDRESS = re.compile(r"[0-9A-Fa-f]+")


class SidecarParseError(ValueError):
    """Raised when a sidecar line is malformed or an address repeats."""
    pass


class StringRecord(NamedTuple):
    """Text found behind one pointer slot."""
    address: int
    text: str


def sidecar_path(image_path: str) -> str:
    """Sidecar file location for an image."""
    return image_path + SIDECAR_EXTENSION


def escape_line_breaks(text: str) -> str:
    return text.replace("\n", LINE_BREAK_ESCAPE)


def unescape_line_breaks(text: str) -> str:
    return text.replace(LINE_BREAK_ESCAPE, "\n")


def format_record(record: StringRecord) -> str:
    """Sidecar line for a record, without the trailing newline."""
    return f"{record.address:X},{escape_line_breaks(record.text)}"


def parse_line(line: str, line_number: int = 0) -> StringRecord:
    """
    Parse one sidecar line.

    :param line: Line content, without its line ending
    :param line_number: Line number for error messages
    :raises SidecarParseError: If there is no comma or the address is not hexadecimal
    """
    address, sep, text = line.partition(",")
    if not sep:
        raise SidecarParseError(f"Line {line_number}: missing ',' separator")
    if not HEX_ADDRESS.fullmatch(address):
        raise SidecarParseError(
            f"Line {line_number}: '{address}' is not a hexadecimal address"
        )
    return StringRecord(int(address, 16), unescape_line_breaks(text))


def write_sidecar(records: Iterable[StringRecord], output_file: str) -> int:
    """
    Write records to a sidecar file, one line each.

    Lines are written as records arrive, so an error mid-way leaves a
    partial file behind.

    :return: Number of lines written
    """
    lines = 0
    with open(output_file, "w", newline="\n", encoding="utf-8") as sidecar:
        for record in records:
            sidecar.write(format_record(record) + "\n")
            lines += 1
    return lines


def read_sidecar(input_file: str) -> dict[int, str]:
    """
    Load a sidecar file as a mapping from slot address to text.

    Blank lines are skipped.

    :param input_file: Sidecar file path
    :raises SidecarParseError: On a malformed line or a duplicated address
    """
    with open(input_file, "r", newline="", encoding="utf-8") as sidecar:
        content = sidecar.read()

    strings: dict[int, str] = {}
    for line_number, line in enumerate(content.split("\n"), start=1):
        if line.endswith("\r"):
            line = line[:-1]
        if not line:
            continue
        record = parse_line(line, line_number)
        if record.address in strings:
            raise SidecarParseError(
                f"Line {line_number}: address {record.address:X} appears twice"
            )
        strings[record.address] = record.text
    logger.debug("Read %d lines from %s", len(strings), input_file)
    return strings
