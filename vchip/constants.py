#!/usr/bin/env python3

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

# App identification
APP_NAME = "VChip-8 Emulator"
APP_VERSION = "1.0.0"
APP_COPYRIGHT = "Copyright (C) 2022 Gregory Maynard-Hoare, licensed under GNU Affero General Public License v3.0"
APP_INTRO = "{} V{} -- ".format(APP_NAME, APP_VERSION)

# Memory layout
MEMORY_SIZE = 0x1000
ADDRESS_MASK = 0xFFF  # Every derived address wraps at 4K
FONT_ADDRESS = 0x000
PROGRAM_ADDRESS = 0x200
STACK_LEVELS = 16
REGISTER_COUNT = 16
KEY_COUNT = 16

# Display
VIDEO_WIDTH = 64
VIDEO_HEIGHT = 32

# Timers and display refresh run at 60Hz regardless of the CPU clock speed
TIMER_FREQ = 60.0
DEFAULT_CLOCK_SPEED = 700

# Hexadecimal digits 0-F, 5 bytes each, 4 pixels wide
FONT_GLYPH_SIZE = 5
FONT_SET = bytes((
    0xF0, 0x90, 0x90, 0x90, 0xF0,  # 0
    0x20, 0x60, 0x20, 0x20, 0x70,  # 1
    0xF0, 0x10, 0xF0, 0x80, 0xF0,  # 2
    0xF0, 0x10, 0xF0, 0x10, 0xF0,  # 3
    0x90, 0x90, 0xF0, 0x10, 0x10,  # 4
    0xF0, 0x80, 0xF0, 0x10, 0xF0,  # 5
    0xF0, 0x80, 0xF0, 0x90, 0xF0,  # 6
    0xF0, 0x10, 0x20, 0x40, 0x40,  # 7
    0xF0, 0x90, 0xF0, 0x90, 0xF0,  # 8
    0xF0, 0x90, 0xF0, 0x10, 0xF0,  # 9
    0xF0, 0x90, 0xF0, 0x90, 0x90,  # A
    0xE0, 0x90, 0xE0, 0x90, 0xE0,  # B
    0xF0, 0x80, 0x80, 0x80, 0xF0,  # C
    0xE0, 0x90, 0x90, 0x90, 0xE0,  # D
    0xF0, 0x80, 0xF0, 0x80, 0xF0,  # E
    0xF0, 0x80, 0xF0, 0x80, 0x80   # F
))

# Default mappings for keys 0-F.  Note that the keyscans (on a UK QWERTY keyboard) and ASCII characters for these are
# the same code, so the layout is x 1 2 3 q w e a s d z c 4 r f v
DEFAULT_KEYMAP = "120,49,50,51,113,119,101,97,115,100,122,99,52,114,102,118"

# CPU quirks, in the order they are reported
CPU_QUIRKS = ["vf_reset", "memory", "clipping", "shifting", "jumping", "release"]

# Quirk presets, one per historical interpreter.  Fx0A always waits for the key to come back up, and only XO-CHIP
# wraps sprites around the screen edges.  "chip8" is used when nothing is selected.
QUIRK_PRESETS = {
    #             vf_reset memory clipping shifting jumping release
    "chip8":     (True,    True,  True,    False,   False,  True),  # COSMAC VIP
    "schip1.0":  (False,   False, True,    True,    True,   True),  # Super-CHIP 1.0 on the HP48
    "schip1.1":  (False,   True,  True,    True,    True,   True),
    "xochip":    (False,   True,  False,   False,   False,  True)   # Octo
}
DEFAULT_QUIRK_PRESET = "chip8"
