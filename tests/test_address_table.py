"""Tests for the pointer table layout and slot traversal."""

import unittest

from saetext.address_table import (
    AddressRange,
    AddressTable,
    FreeRegion,
    DEFAULT_ADDRESS_TABLE,
    SLOT_SIZE,
)


class TestAddressRange(unittest.TestCase):
    """Tests for AddressRange slot generation."""

    def test_two_slots(self):
        """A 16-byte table holds two slots, end excluded."""
        address_range = AddressRange(0x1000, 0x1010)
        self.assertEqual(list(address_range.slots()), [0x1000, 0x1008])
        self.assertEqual(len(address_range), 2)

    def test_empty_range(self):
        """A range ending where it starts has no slot."""
        address_range = AddressRange(0x2000, 0x2000)
        self.assertEqual(list(address_range.slots()), [])
        self.assertEqual(len(address_range), 0)

    def test_partial_slot_rejected(self):
        """End must be reachable by whole strides."""
        with self.assertRaises(ValueError):
            AddressRange(0x1000, 0x100C)

    def test_reversed_range_rejected(self):
        with self.assertRaises(ValueError):
            AddressRange(0x1010, 0x1000)

    def test_immutable(self):
        address_range = AddressRange(0x1000, 0x1010)
        with self.assertRaises(AttributeError):
            address_range.start = 0


class TestFreeRegion(unittest.TestCase):
    """Tests for FreeRegion bounds."""

    def test_capacity(self):
        self.assertEqual(FreeRegion(0x1080, 0x10A0).capacity, 32)

    def test_empty_region(self):
        self.assertEqual(FreeRegion(0x1080, 0x1080).capacity, 0)

    def test_unaligned_rejected(self):
        """Allocation starts must stay 4-byte aligned."""
        with self.assertRaises(ValueError):
            FreeRegion(0x1082, 0x10A0)

    def test_reversed_rejected(self):
        with self.assertRaises(ValueError):
            FreeRegion(0x10A0, 0x1080)


class TestAddressTable(unittest.TestCase):
    """Tests for the canonical traversal and address translation."""

    def setUp(self):
        self.table = AddressTable(
            ranges=(
                AddressRange(0x1030, 0x1040),
                AddressRange(0x1100, 0x1100),
                AddressRange(0x1010, 0x1018),
            ),
            diff=0x1000,
            free_region=FreeRegion(0x1080, 0x1100),
        )

    def test_declared_order(self):
        """Ranges are visited in declared order, not address order."""
        self.assertEqual(list(self.table.iter_slots()), [0x1030, 0x1038, 0x1010])

    def test_traversal_is_repeatable(self):
        """Extraction and patch walk the exact same sequence."""
        self.assertEqual(list(self.table.iter_slots()), list(self.table.iter_slots()))

    def test_slot_count(self):
        self.assertEqual(self.table.slot_count, 3)

    def test_translation(self):
        self.assertEqual(self.table.to_physical(0x1038), 0x38)
        self.assertEqual(self.table.to_virtual(0x38), 0x1038)


class TestDefaultAddressTable(unittest.TestCase):
    """Sanity checks on the shipped layout."""

    def test_constants(self):
        self.assertEqual(DEFAULT_ADDRESS_TABLE.diff, 0x1FFC000)
        self.assertEqual(len(DEFAULT_ADDRESS_TABLE.ranges), 11)
        self.assertEqual(DEFAULT_ADDRESS_TABLE.free_region.start, 0x02106AD8)
        self.assertEqual(DEFAULT_ADDRESS_TABLE.free_region.end, 0x0213E3A8)

    def test_first_and_last_slots(self):
        slots = list(DEFAULT_ADDRESS_TABLE.iter_slots())
        self.assertEqual(slots[0], 0x020D0938)
        self.assertEqual(slots[-1], 0x020F67E8 - SLOT_SIZE)
        self.assertEqual(len(slots), DEFAULT_ADDRESS_TABLE.slot_count)

    def test_slots_are_unique(self):
        slots = list(DEFAULT_ADDRESS_TABLE.iter_slots())
        self.assertEqual(len(slots), len(set(slots)))


if __name__ == "__main__":
    unittest.main()
