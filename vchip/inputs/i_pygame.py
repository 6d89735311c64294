#!/usr/bin/env python3

"""
PyGame Input Plugin

Reads the PyGame event queue and forwards key presses and releases to the
emulated keypad as they happen.  The queue should not be drained more often
than 60Hz, as constantly checking it is time consuming.

Closing the window or releasing ESC asks the machine to stop, and releasing P
(or Pause) pauses or resumes it, unless those keys are mapped to the keypad.
Losing window focus releases every emulated key, since PyGame won't report
key-up events for keys let go while another window is active.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

import pygame
from .i_null import Inputs as InputsBase


class Inputs(InputsBase):
    def __init__(self, keymap, renderer, on_key=None):
        self.event_handlers = {
            pygame.QUIT:             lambda _: True,
            pygame.KEYDOWN:          self._key_event,
            pygame.KEYUP:            self._key_event,
            pygame.WINDOWFOCUSLOST:  self._focus_lost
        }

        super().__init__(keymap, renderer, on_key)

    def process_messages(self):
        quit_program = False

        for event in pygame.event.get():
            handler = self.event_handlers.get(event.type)

            if handler is not None and handler(event):
                quit_program = True  # Keep draining the queue so no key release gets lost

        return quit_program

    def _key_event(self, event):
        pressed = event.type == pygame.KEYDOWN

        if self.report_key(event.key, pressed) is not None:
            return False

        if not pressed:
            if event.key == pygame.K_ESCAPE:
                return True

            if event.key in (pygame.K_p, pygame.K_PAUSE):
                self.report_pause()

        return False

    def _focus_lost(self, _):
        for host_key in self.keymap_dict:
            self.report_key(host_key, False)

        return False
