#!/usr/bin/env python3

"""
Machine

Drives a CPU in real time.  The CPU itself only knows how to execute one
instruction, so this is where the clock lives:

    * Instructions run at the selected clock speed (or as fast as possible).
    * The delay and sound timers count down at 60Hz, however fast the CPU is.
    * Host inputs are processed, and the display refreshed, at 60Hz.

Key events from the input plugin go straight into the CPU keypad.  While
paused, inputs and the display are still serviced, but the CPU and its timers
are frozen.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

from time import perf_counter
from .constants import APP_NAME, TIMER_FREQ

TIMER_INTERVAL = 1.0 / TIMER_FREQ
DISPLAY_FREQ = 60.0  # 60Hz emulated display refresh
DISPLAY_INTERVAL = 1.0 / DISPLAY_FREQ
MAX_TIMER_CATCHUP = 60  # If the host stalls for longer than a second, don't try to catch up on every tick


class Machine:
    def __init__(self, cpu, renderer, inputs, clock_speed=None, clock=perf_counter):
        self.cpu = cpu
        self.renderer = renderer
        self.inputs = inputs
        self.clock = clock
        self.core_interval = None if not clock_speed or clock_speed <= 0 else 1.0 / clock_speed
        self.paused = False

        self.inputs.set_key_handler(self.cpu.set_key)
        self.inputs.set_pause_handler(self.toggle_pause)
        self.renderer.set_resolution(*self.cpu.framebuffer.get_vid_size())
        self.report_perf()

        self.next_timer_time = 0
        self.next_display_update_time = 0
        self.next_perf_report_time = 0
        self.perf_counter_fps = 0
        self.perf_counter_ops = 0

    def load_rom(self, data):
        # Swapping ROMs keeps the same CPU, so its quirks and the input hookup survive
        self.cpu.reset()
        self.cpu.load(data)

    def set_paused(self, paused):
        self.paused = paused
        self.report_perf()

    def toggle_pause(self):
        self.set_paused(not self.paused)

    def render(self):
        framebuffer = self.cpu.framebuffer

        if framebuffer.take_changed():
            set_pixel = self.renderer.set_pixel

            for location, pixel in enumerate(framebuffer.pixels):
                set_pixel(location, pixel)

            self.renderer.refresh_display(True)

    def report_perf(self, fps=0, ops=0):
        if self.paused:
            self.renderer.set_title("{} - Paused".format(APP_NAME))
        else:
            self.renderer.set_title("{} - {} FPS, {} OPS".format(APP_NAME, fps, ops))

    def tick_timers(self, this_time):
        # Count down once for every 60th of a second that has passed since the last tick
        ticks = 0

        while this_time >= self.next_timer_time:
            if ticks < MAX_TIMER_CATCHUP:
                self.cpu.tick_timers()
                ticks += 1
                self.next_timer_time += TIMER_INTERVAL
            else:
                self.next_timer_time = this_time + TIMER_INTERVAL

        return ticks

    def run_cycles(self, cycles):
        # Untimed execution, for headless use
        for _ in range(cycles):
            self.cpu.step()

    def run(self, max_cycles=None):
        # Returns the number of instructions executed, once the inputs ask to quit (or max_cycles is reached)
        clock = self.clock
        start_time = clock()
        self.next_timer_time = start_time + TIMER_INTERVAL
        cycles = 0

        while max_cycles is None or cycles < max_cycles:
            this_time = clock()  # Do this first for maximum precision

            # Performance counters
            if this_time >= self.next_perf_report_time:
                self.next_perf_report_time = int(this_time) + 1.0
                self.report_perf(self.perf_counter_fps, self.perf_counter_ops)
                self.perf_counter_ops = 0
                self.perf_counter_fps = 0

            # Prevent unnecessary display rendering in excess of host frame rate
            if this_time >= self.next_display_update_time:
                if self.inputs.process_messages():  # Process inputs at 60Hz too, to avoid slowdown
                    break

                self.next_display_update_time = this_time + DISPLAY_INTERVAL
                self.render()
                self.perf_counter_fps += 1

            if self.paused:
                # Time spent paused is never made up by the timers
                self.next_timer_time = this_time + TIMER_INTERVAL
                continue

            self.tick_timers(this_time)
            self.cpu.step()
            cycles += 1
            self.perf_counter_ops += 1

            if self.core_interval is not None:
                # Wait for next CPU instruction.  Do this last for maximum precision (takes into account time spent on
                # this instruction)
                next_time = this_time + self.core_interval

                while clock() < next_time:  # Unfortunately we have to do this to get the timing right
                    pass

        # Show whatever was drawn last, in case the loop stopped between refreshes
        self.render()
        return cycles
