#!/usr/bin/env python3

"""
Keypad Emulator

Holds the up/down state of the 16 hexadecimal keys.  The host input system
reports every physical press and release here, and the CPU only ever reads it.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

from .constants import KEY_COUNT


class KeypadError(Exception):
    pass


class Keypad:
    def __init__(self):
        self.key_down = [False] * KEY_COUNT

    def set_key(self, key, pressed):
        if not 0 <= key < KEY_COUNT:
            raise KeypadError("Key 0x{:x} is outside the 16-key pad".format(key))

        self.key_down[key] = bool(pressed)

    def is_key_down(self, key):
        return self.key_down[key]

    def first_key_down(self):
        # Lowest-numbered key currently held, or None
        for key, down in enumerate(self.key_down):
            if down:
                return key

        return None

    def release_all(self):
        for key in range(KEY_COUNT):
            self.key_down[key] = False
