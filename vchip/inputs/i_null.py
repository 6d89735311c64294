#!/usr/bin/env python3

"""
Null Input Plugin

Serves as a base class for other Input plugins.  Can be used on its own if zero
input functionality is required.

Input plugins translate host key codes into the 16 keys of the emulated
keypad.  Every press and release is passed on straight away through the
'on_key' callback (normally CPU.set_key), so the plugins hold no key state of
their own.  A request to pause or resume goes through 'on_pause' the same way.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

from ..constants import KEY_COUNT


class InputsError(Exception):
    pass


class Inputs:
    def __init__(self, keymap, renderer, on_key=None):
        self.keymap_dict = {}
        self.renderer = renderer
        self.on_key = on_key
        self.on_pause = None
        keymap_split = keymap.split(",")

        if len(keymap_split) != KEY_COUNT:
            raise InputsError("Incorrect number of keys defined -- 16 required.  Use commas to split numbers")

        for key_num, key_defined in enumerate(keymap_split):
            try:
                key_defined_ord = int(key_defined)
            except ValueError:
                raise InputsError("Defined keys are not all integer values") from None

            if key_defined_ord in self.keymap_dict:
                raise InputsError("Duplicate keys defined")

            self.keymap_dict[key_defined_ord] = key_num

    def set_key_handler(self, on_key):
        self.on_key = on_key

    def set_pause_handler(self, on_pause):
        self.on_pause = on_pause

    def report_key(self, host_key, pressed):
        # Returns the emulated key number, or None if the host key isn't mapped
        hex_key = self.keymap_dict.get(host_key)

        if hex_key is not None and self.on_key is not None:
            self.on_key(hex_key, pressed)

        return hex_key

    def report_pause(self):
        if self.on_pause is not None:
            self.on_pause()

    def process_messages(self):
        return False  # Don't exit the program

    def shutdown(self):
        pass
