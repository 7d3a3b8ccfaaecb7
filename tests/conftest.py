# SPDX-License-Identifier: MIT

"""
Shared pytest fixtures for pkghealth tests.

The PE builder produces the smallest image pefile accepts: a DOS header, the
NT signature, a file header and an optional header with empty data
directories, no sections. That is all the relocation check reads.
"""

import struct
import textwrap
from pathlib import Path
from typing import Callable

import pytest

_E_LFANEW = 0x80
_IMAGE_SIZE_ON_DISK = 0x400
_DATA_DIRECTORY_COUNT = 16


def build_pe_image(image_base: int, image_size: int, is_64bit: bool = False) -> bytes:
    """Raw bytes of a minimal PE32 (or PE32+) DLL with the given header fields."""
    dos_header = bytearray(64)
    dos_header[0:2] = b"MZ"
    struct.pack_into("<I", dos_header, 0x3C, _E_LFANEW)

    if is_64bit:
        optional_header = struct.pack(
            "<HBBIIIIIQIIHHHHHHIIIIHHQQQQII",
            0x20B,  # Magic, PE32+
            14, 0,  # linker version
            0x1000, 0x1000, 0,  # code / initialized / uninitialized sizes
            0x1000,  # AddressOfEntryPoint
            0x1000,  # BaseOfCode
            image_base,
            0x1000, 0x200,  # section / file alignment
            6, 0, 0, 0, 6, 0,  # OS / image / subsystem versions
            0,  # Win32VersionValue
            image_size,
            0x200,  # SizeOfHeaders
            0,  # CheckSum
            3,  # Subsystem: console
            0,  # DllCharacteristics
            0x100000, 0x1000, 0x100000, 0x1000,  # stack / heap
            0,  # LoaderFlags
            _DATA_DIRECTORY_COUNT,
        )
        machine, characteristics = 0x8664, 0x2022
    else:
        optional_header = struct.pack(
            "<HBBIIIIIIIIIHHHHHHIIIIHHIIIIII",
            0x10B,  # Magic, PE32
            14, 0,
            0x1000, 0x1000, 0,
            0x1000,
            0x1000,
            0x2000,  # BaseOfData
            image_base,
            0x1000, 0x200,
            6, 0, 0, 0, 6, 0,
            0,
            image_size,
            0x200,
            0,
            3,
            0,
            0x100000, 0x1000, 0x100000, 0x1000,
            0,
            _DATA_DIRECTORY_COUNT,
        )
        machine, characteristics = 0x14C, 0x2102

    optional_header += bytes(8 * _DATA_DIRECTORY_COUNT)
    file_header = struct.pack(
        "<HHIIIHH",
        machine,
        0,  # NumberOfSections
        0, 0, 0,  # timestamp, symbol table, symbol count
        len(optional_header),
        characteristics,
    )

    image = bytearray(_IMAGE_SIZE_ON_DISK)
    image[0:64] = dos_header
    nt_headers = b"PE\x00\x00" + file_header + optional_header
    image[_E_LFANEW : _E_LFANEW + len(nt_headers)] = nt_headers
    return bytes(image)


@pytest.fixture()
def pe_image() -> Callable[..., bytes]:
    """The minimal PE image builder, for tests that want raw bytes."""
    return build_pe_image


@pytest.fixture()
def install_dir(tmp_path: Path) -> Path:
    """An empty install root."""
    root = tmp_path / "opt" / "app"
    root.mkdir(parents=True)
    return root


@pytest.fixture()
def make_dll(install_dir: Path) -> Callable[..., Path]:
    """
    Write a DLL below <install_dir>/embedded/bin.

    make_dll("b/b", 0x10000000, 0x1000) creates embedded/bin/b/b.dll.
    """

    def _make(relative_id: str, image_base: int, image_size: int, is_64bit: bool = False) -> Path:
        path = install_dir / "embedded" / "bin" / f"{relative_id}.dll"
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(build_pe_image(image_base, image_size, is_64bit=is_64bit))
        return path

    return _make


@pytest.fixture()
def tmp_config_file(tmp_path: Path) -> Path:
    """The smallest config that passes schema validation."""
    config_content = textwrap.dedent("""\
        global:
          config_version: "1.0.0"
          log_level: "DEBUG"
    """)
    config_file = tmp_path / "test_config.yaml"
    config_file.write_text(config_content, encoding="utf-8")
    return config_file


@pytest.fixture()
def invalid_config_file(tmp_path: Path) -> Path:
    """Valid YAML that fails schema validation (missing config_version)."""
    config_content = textwrap.dedent("""\
        global:
          log_level: "INFO"
    """)
    config_file = tmp_path / "invalid_config.yaml"
    config_file.write_text(config_content, encoding="utf-8")
    return config_file


@pytest.fixture()
def broken_yaml_file(tmp_path: Path) -> Path:
    """A file that isn't valid YAML at all."""
    config_file = tmp_path / "broken.yaml"
    config_file.write_text("{{not: yaml: at: all:::", encoding="utf-8")
    return config_file
