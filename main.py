"""
Text extractor/patcher for the pointer tables of a ROM image.

Extraction writes every string to ``<image>.sae``; patching reads that file
back and relocates the strings into the image's free space.
"""

import argparse
import logging
import os
import sys

import saetext

logger = logging.getLogger(__name__)


def parse_inputs():
    """Parse console arguments."""
    parser = argparse.ArgumentParser(
        prog="SaeTextHandler",
        description="Extracts the pointer table strings of a ROM image to a "
        + ".sae text file, and patches edited strings back.",
    )
    parser.add_argument("filename", type=str, help="ROM image file.")
    action = parser.add_mutually_exclusive_group(required=True)
    action.add_argument(
        "-e",
        "--extract",
        action="store_true",
        help="Write every string to '<filename>.sae'.",
    )
    action.add_argument(
        "-p",
        "--patch",
        action="store_true",
        help="Write the strings of '<filename>.sae' back into the image, in place.",
    )
    return parser


def main(args, table=saetext.DEFAULT_ADDRESS_TABLE):
    """
    Run the requested action.

    :return int: Process exit status
    """
    if not os.path.exists(args.filename):
        logger.error("'%s' does not exist.", args.filename)
        return 1

    try:
        if args.extract:
            saetext.extract_to_sidecar(args.filename, table)
        elif args.patch:
            result = saetext.patch_from_sidecar(args.filename, table)
            logger.info(
                "Patched %d strings, %d bytes of free space left",
                result.slots_written,
                result.headroom,
            )
    except (ValueError, OSError) as exc:
        logger.error("%s", exc)
        return 1
    return 0


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(message)s")
    sys.exit(main(parse_inputs().parse_args()))
