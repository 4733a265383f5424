"""
Pointer table layout of the image.

Each table is a run of 8-byte slots: a little-endian pointer to a
null-terminated string, followed by 4 bytes the game uses for something else.
Addresses are virtual (as seen by the game); subtract ``diff`` to get the
offset in the image file.
"""
import itertools
from dataclasses import dataclass
from typing import Iterator

SLOT_SIZE = 8
ALIGNMENT = 4


@dataclass(frozen=True)
class AddressRange:
    """Pointer table spanning [start, end) in virtual addresses."""
    start: int
    end: int

    def __post_init__(self):
        if self.end < self.start:
            raise ValueError(
                f"Range end 0x{self.end:X} is before its start 0x{self.start:X}"
            )
        if (self.end - self.start) % SLOT_SIZE:
            raise ValueError(
                f"Range 0x{self.start:X}-0x{self.end:X} is not a whole number "
                f"of {SLOT_SIZE}-byte slots"
            )

    def slots(self) -> range:
        """Virtual address of each slot, in table order."""
        return range(self.start, self.end, SLOT_SIZE)

    def __len__(self):
        return (self.end - self.start) // SLOT_SIZE


@dataclass(frozen=True)
class FreeRegion:
    """Virtual window [start, end) that receives the relocated strings."""
    start: int
    end: int

    def __post_init__(self):
        if self.end < self.start:
            raise ValueError(
                f"Free region end 0x{self.end:X} is before its start 0x{self.start:X}"
            )
        if self.start % ALIGNMENT or self.end % ALIGNMENT:
            raise ValueError(
                f"Free region 0x{self.start:X}-0x{self.end:X} is not "
                f"{ALIGNMENT}-byte aligned"
            )

    @property
    def capacity(self) -> int:
        """Number of bytes available."""
        return self.end - self.start


@dataclass(frozen=True)
class AddressTable:
    """
    Complete text layout of one image.

    :param ranges: Pointer tables, in the order strings are extracted and allocated
    :param diff: Value subtracted from a virtual address to get a file offset
    :param free_region: Where patched strings are written
    """
    ranges: tuple[AddressRange, ...]
    diff: int
    free_region: FreeRegion

    def iter_slots(self) -> Iterator[int]:
        """
        Yield every slot address, table after table.

        Extraction and patching both walk this sequence, so sidecar lines and
        allocations always line up.
        """
        return itertools.chain.from_iterable(r.slots() for r in self.ranges)

    @property
    def slot_count(self) -> int:
        """Total number of slots over all tables."""
        return sum(len(r) for r in self.ranges)

    def to_physical(self, address: int) -> int:
        """Convert a virtual address to a file offset."""
        return address - self.diff

    def to_virtual(self, offset: int) -> int:
        """Convert a file offset to a virtual address."""
        return offset + self.diff


DEFAULT_ADDRESS_TABLE = AddressTable(
    ranges=(
        AddressRange(0x020D0938, 0x020D4770),
        AddressRange(0x020D725C, 0x020D8DE4),
        AddressRange(0x020DB1D4, 0x020DC954),
        AddressRange(0x020DEE2C, 0x020E05D4),
        AddressRange(0x020E3050, 0x020E4A88),
        AddressRange(0x020E81C8, 0x020EA460),
        AddressRange(0x020EBDD0, 0x020ECD78),
        AddressRange(0x020EE6EC, 0x020EF684),
        AddressRange(0x020F0E40, 0x020F1CD8),
        AddressRange(0x020F3348, 0x020F4150),
        AddressRange(0x020F5988, 0x020F67E8),
    ),
    diff=0x1FFC000,
    free_region=FreeRegion(0x02106AD8, 0x0213E3A8),
)
