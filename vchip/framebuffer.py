#!/usr/bin/env python3

"""
Framebuffer Emulator

Pixels are written here by the CPU, and are usually only copied to the actual
display (the host rendering system) at 60Hz by whoever drives the emulator.
The framebuffer knows nothing about the renderer, so it can be inspected
directly in tests or by any other front end.

Unlike other computers, programs for this system cannot write directly into
video RAM.  Instead, sprites are drawn to the screen using an XOR method, and
the only other operation is a full clear.

Collisions (where any pixel was set, but was unset by an XOR), are reported
back to the caller, which turns them into the VF flag.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

from .constants import VIDEO_WIDTH, VIDEO_HEIGHT
from .ram import RAM


class Framebuffer:
    def __init__(self, vid_width=VIDEO_WIDTH, vid_height=VIDEO_HEIGHT):
        self.vid_width = vid_width
        self.vid_height = vid_height
        self.vid_size = vid_width * vid_height
        self.vram = RAM()
        self.vram.resize(self.vid_size)
        self.changed = True  # Force the first frame to be drawn

    @property
    def pixels(self):
        return self.vram.mem.toreadonly()

    def clear(self):
        self.vram.clear()
        self.changed = True

    def xor_pixel(self, x, y):
        # Returns True if the pixel was set before being toggled (a collision).  Coordinates are always wrapped here;
        # clipping is the caller's decision.
        vram_loc = (y % self.vid_height) * self.vid_width + (x % self.vid_width)
        pixel = self.vram.read(vram_loc)
        self.vram.write(vram_loc, pixel ^ 1)
        self.changed = True
        return pixel != 0

    def get_pixel(self, x, y):
        return self.vram.read(y * self.vid_width + x) != 0

    def get_pixels(self):
        # Read-only copy for renderers, row-major
        return tuple(pixel != 0 for pixel in self.vram.mem)

    def get_vid_size(self):
        return self.vid_width, self.vid_height

    def take_changed(self):
        # Reports whether anything was drawn since the last call, then resets the flag
        changed = self.changed
        self.changed = False
        return changed
