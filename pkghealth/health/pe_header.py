# SPDX-License-Identifier: MIT

"""
PE header decoding.

The relocation check only needs three facts per DLL: is it PE32 or PE32+,
its preferred image base, and its image size. pefile does the parsing from
raw bytes, so the check runs the same on a Linux build host as on Windows.
fast_load skips the data directories, which we never look at.
"""

from dataclasses import dataclass
from pathlib import Path

import pefile

from pkghealth.health.exceptions import HeaderDecodeError


@dataclass(frozen=True)
class PEHeader:
    """The optional-header fields the relocation check uses."""

    is_64bit: bool
    image_base: int
    image_size: int


def decode_header(data: bytes) -> PEHeader:
    """
    Decode the optional header of a PE32 or PE32+ image.

    Raises:
        HeaderDecodeError: The bytes are not a PE image, or the header
            reports a zero image size.
    """
    try:
        pe = pefile.PE(data=data, fast_load=True)
    except pefile.PEFormatError as err:
        raise HeaderDecodeError(f"Not a PE image: {err}") from err

    try:
        optional_header = pe.OPTIONAL_HEADER
        is_64bit = optional_header.Magic == pefile.OPTIONAL_HEADER_MAGIC_PE_PLUS
        header = PEHeader(
            is_64bit=is_64bit,
            image_base=int(optional_header.ImageBase),
            image_size=int(optional_header.SizeOfImage),
        )
    finally:
        pe.close()

    if header.image_size <= 0:
        raise HeaderDecodeError("PE optional header reports SizeOfImage of 0")

    return header


def read_header(path: Path) -> PEHeader:
    """
    Read a file and decode its PE header. The file is closed before decoding.

    Raises:
        HeaderDecodeError: The file can't be read or isn't a valid PE image.
    """
    try:
        with open(path, "rb") as handle:
            data = handle.read()
    except OSError as err:
        raise HeaderDecodeError(f"Cannot read module: {err}", path=str(path)) from err

    try:
        return decode_header(data)
    except HeaderDecodeError as err:
        raise HeaderDecodeError(str(err), path=str(path)) from err
