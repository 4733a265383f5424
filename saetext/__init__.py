"""
Definition of the SaeTextHandler module.
"""

from .address_table import (
    AddressRange,
    AddressTable,
    FreeRegion,
    DEFAULT_ADDRESS_TABLE,
)
from .binary_file import BinaryFile, InvalidPointerError
from .common import (
    GAME_ENCODING,
    EncodingError,
    decode_game_string,
    encode_game_string,
)
from .sidecar import SidecarParseError, StringRecord, read_sidecar, write_sidecar
from .export import extract_strings, extract_to_sidecar
from .import_data import (
    CapacityReport,
    InsufficientSpaceError,
    MissingSlotError,
    PatchResult,
    calculate_required_size,
    patch_from_sidecar,
    patch_strings,
)
