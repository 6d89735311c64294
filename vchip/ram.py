#!/usr/bin/env python3

"""
RAM Emulator

Supports reading and writing of blocks of memory or individual bytes, and
clearing everything at once.

A single region can be write-protected.  System RAM uses this to keep the
built-in font intact, because nothing a running program does should be able to
corrupt the glyphs.  Reads are never restricted.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"


class RAMError(Exception):
    pass


class RAM:
    def __init__(self):
        self.protect_start = 0
        self.protect_end = 0
        self.resize(0)

    def resize(self, mem_size):
        self.mem = memoryview(bytearray(b"\x00" * mem_size))
        self.mem_top = mem_size - 1
        self.mem_size = mem_size

    def read(self, location):
        return self.mem[location]

    def read_block(self, location, size=1):
        return self.mem[location:location + size]

    def write(self, location, byte):
        self.check_overflow(location)
        self.check_protected(location, location + 1)
        self.mem[location] = byte

    def write_block(self, location, block):
        block_size = len(block)
        block_top = location + block_size
        self.check_overflow(block_top - 1)
        self.check_protected(location, block_top)
        self.mem[location:block_top] = block

    def check_overflow(self, location):
        if location > self.mem_top:
            raise RAMError("Memory overflow")

    def protect(self, location, size):
        # Only one region can be protected.  A size of 0 lifts protection.
        self.protect_start = location
        self.protect_end = location + size

    def is_protected(self, location):
        return self.protect_start <= location < self.protect_end

    def check_protected(self, start, end):
        if start < self.protect_end and end > self.protect_start:
            raise RAMError(
                "Write to protected memory 0x{:03x}-0x{:03x}".format(self.protect_start, self.protect_end - 1)
            )

    def clear(self):
        # Ignores protection, as this is only used to power the system back on
        self.mem[:] = bytes(self.mem_size)
