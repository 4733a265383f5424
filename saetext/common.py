"""
Text codec and string reading helpers shared by extraction and patching.
"""
import codecs
import os

from .binary_file import BinaryFile

# The game stores text as Shift-JIS with the Microsoft extensions (Windows-31J)
GAME_ENCODING = "cp932"


class EncodingError(ValueError):
    """Raised when text cannot be converted to or from the game encoding."""
    pass


def decode_game_string(data: bytes, errors: str = "strict", context: str = "") -> str:
    """
    Decode bytes from the game encoding.

    :param data: Raw string bytes, without the null terminator
    :param errors: Codec error handler, "strict" unless a lossy view is wanted
    :param context: Location to mention in the error message
    :raises EncodingError: If data is not valid in the game encoding
    """
    try:
        return codecs.decode(data, GAME_ENCODING, errors)
    except UnicodeDecodeError as exc:
        ctx = f" at {context}" if context else ""
        raise EncodingError(
            f"Cannot decode {data[exc.start:exc.end]!r} as {GAME_ENCODING}{ctx}"
        ) from exc


def encode_game_string(text: str, errors: str = "strict", context: str = "") -> bytes:
    """
    Encode text to the game encoding.

    :param text: Text to encode
    :param errors: Codec error handler
    :param context: Location to mention in the error message
    :raises EncodingError: If a character has no representation in the game
        encoding, or would be read back as another character
    """
    ctx = f" at {context}" if context else ""
    try:
        data = codecs.encode(text, GAME_ENCODING, errors)
    except UnicodeEncodeError as exc:
        raise EncodingError(
            f"Cannot encode {text[exc.start:exc.end]!r} to {GAME_ENCODING}{ctx}"
        ) from exc
    if errors == "strict":
        # cp932 maps a few characters onto look-alikes, e.g. U+301C to U+FF5E
        decoded = codecs.decode(data, GAME_ENCODING)
        if decoded != text:
            index = next(
                (i for i, (a, b) in enumerate(zip(text, decoded)) if a != b),
                min(len(text), len(decoded)),
            )
            char = text[index] if index < len(text) else decoded[index]
            raise EncodingError(
                f"Cannot encode {char!r} (U+{ord(char):04X}) to {GAME_ENCODING} "
                f"without changing it{ctx}"
            )
    return data


def read_until_null(bfile: BinaryFile) -> bytes:
    """
    Read data until we meet null terminator or end of file.

    :param bfile: File to read from
    :return: Data read, terminator excluded
    """
    stream = bytearray()
    byte = bfile.read(1)
    while byte != b"\x00" and byte != b"":
        stream += byte
        byte = bfile.read(1)
    return bytes(stream)


def read_string_at(bfile: BinaryFile, offset: int, context: str = "") -> str:
    """
    Read the null-terminated string at offset, then come back.

    The current position is restored so table scans can go on reading slots.

    :param bfile: Image to read from
    :param offset: File offset of the string
    :param context: Location to mention in error messages
    """
    position = bfile.tell()
    bfile.validate_offset(offset, context)
    bfile.seek(offset)
    try:
        return decode_game_string(read_until_null(bfile), context=context)
    finally:
        bfile.seek(position, os.SEEK_SET)
