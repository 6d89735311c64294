#!/usr/bin/env python3

"""
PyGame Renderer Plugin

Draws the framebuffer onto an SDL window via PyGame.  An offscreen RGB buffer
holds one entry per emulated pixel, and is only stretched to the window size
('Nearest Neighbour', keeping the aspect ratio of the emulated screen) when
the machine reports that something changed.

Pixels are either off (palette entry 0) or on (palette entry 1).  Optional
Scale2x passes soften the blocky look before the final stretch.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

import pygame
from .r_null import RendererError, Renderer as RendererBase
from ..constants import APP_NAME

DEFAULT_WINDOW_WIDTH = 512
DEFAULT_PALETTE = (0x222222, 0xDDDDDD)  # Background, then foreground


def parse_palette(palette_text, defaults=DEFAULT_PALETTE):
    # "RRGGBB,RRGGBB" -> list of integers.  Missing entries keep their defaults.
    colours = list(defaults)

    if palette_text is None:
        return colours

    palette_split = palette_text.split(",")

    if len(palette_split) > len(colours):
        raise RendererError("Too many palette colours defined.  Only background and foreground can be set.")

    for colour_num, colour_hex in enumerate(palette_split):
        if len(colour_hex) != 6:
            raise RendererError("Palette colours must all be 6 hex digits long.")

        try:
            colours[colour_num] = int(colour_hex, 16)
        except ValueError:
            raise RendererError("Invalid palette colour '{}'.".format(colour_hex)) from None

    return colours


class Renderer(RendererBase):
    def __init__(self, scale=None, pygame_palette=None, smoothing=0, **kwargs):
        self.window_width = DEFAULT_WINDOW_WIDTH if scale is None else scale
        self.smoothing = smoothing or 0
        self.rgb_buffer = None
        self.window_size = None
        self.display_surface = None

        # One 3-byte slice per palette entry, copied straight into the RGB buffer
        self.rgb_map = [colour.to_bytes(3, "big") for colour in parse_palette(pygame_palette)]

        pygame.display.init()
        self.set_title(APP_NAME)
        super().__init__(self.window_width)

    def set_resolution(self, width, height):
        super().set_resolution(width, height)

        if not width or not height:
            return  # Nothing to show until the machine attaches a framebuffer

        self.window_size = (self.window_width, self.window_width * height // width)
        self.display_surface = pygame.display.set_mode(self.window_size)
        self.rgb_buffer = bytearray(self.rgb_map[0] * (width * height))
        self.refresh_display(True)

    def set_pixel(self, location, colour):
        rgb_location = location * 3
        self.rgb_buffer[rgb_location:rgb_location + 3] = self.rgb_map[colour]

    def refresh_display(self, content_changed=False):
        if not content_changed or self.rgb_buffer is None:
            return

        render_surface = pygame.image.frombuffer(self.rgb_buffer, (self.width, self.height), "RGB")

        for _ in range(self.smoothing):
            render_surface = pygame.transform.scale2x(render_surface)

        self.display_surface.blit(pygame.transform.scale(render_surface, self.window_size), (0, 0))
        pygame.display.flip()

    def set_title(self, title):
        pygame.display.set_caption(title)

    def shutdown(self):
        # PyGame can segfault if display.quit is left to __del__
        pygame.display.quit()
        super().shutdown()
