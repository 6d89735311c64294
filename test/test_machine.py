#!/usr/bin/env python3

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

import unittest
from vchip.constants import DEFAULT_KEYMAP
from vchip.cpu import CPU, UndefinedInstruction
from vchip.inputs.i_null import Inputs
from vchip.machine import Machine, TIMER_INTERVAL
from vchip.renderers.r_null import Renderer


class RecordingRenderer(Renderer):
    def __init__(self, **kwargs):
        self.pixels = {}
        self.refreshes = 0
        self.titles = []
        super().__init__(**kwargs)

    def set_pixel(self, location, colour):
        self.pixels[location] = colour

    def refresh_display(self, content_changed=False):
        if content_changed:
            self.refreshes += 1

    def set_title(self, title):
        self.titles.append(title)


class QuittingInputs(Inputs):
    # Presses a key on the first poll, then asks to quit on a later one
    def __init__(self, keymap, renderer, quit_after=2):
        self.polls = 0
        self.quit_after = quit_after
        super().__init__(keymap, renderer)

    def process_messages(self):
        self.polls += 1

        if self.polls == 1:
            self.report_key(49, True)  # Host key '1' is keypad 0x1 in the default map

        return self.polls >= self.quit_after


class ScriptedInputs(Inputs):
    # Each poll takes the next action: "pause" toggles pause, "quit" stops the machine
    def __init__(self, keymap, renderer, actions):
        self.actions = list(actions)
        super().__init__(keymap, renderer)

    def process_messages(self):
        action = self.actions.pop(0) if self.actions else "quit"

        if action == "pause":
            self.report_pause()

        return action == "quit"


class SteppingClock:
    # Moves on by a little more than one display frame every time it is read
    def __init__(self, step=0.02):
        self.now = 100.0
        self.step = step

    def __call__(self):
        now = self.now
        self.now += self.step
        return now


class FakeClock:
    def __init__(self):
        self.now = 100.0

    def __call__(self):
        return self.now


class TestMachine(unittest.TestCase):
    def setUp(self):
        self.cpu = CPU()
        self.renderer = RecordingRenderer()
        self.inputs = Inputs(DEFAULT_KEYMAP, self.renderer)
        self.clock = FakeClock()
        self.machine = Machine(self.cpu, self.renderer, self.inputs, clock_speed=0, clock=self.clock)

    def test_machine_setup(self):
        self.assertEqual((64, 32), (self.renderer.width, self.renderer.height))
        self.assertIn("0 FPS, 0 OPS", self.renderer.titles[-1])
        self.assertIsNone(self.machine.core_interval)

    def test_machine_clock_speed(self):
        machine = Machine(CPU(), Renderer(), Inputs(DEFAULT_KEYMAP, None), clock_speed=500)
        self.assertAlmostEqual(0.002, machine.core_interval)

    def test_machine_inputs_reach_cpu(self):
        self.inputs.report_key(120, True)  # Host key 'x' is keypad 0x0
        self.assertTrue(self.cpu.keypad.is_key_down(0x0))
        self.inputs.report_key(120, False)
        self.assertFalse(self.cpu.keypad.is_key_down(0x0))

    def test_machine_load_rom(self):
        self.machine.load_rom(b"\x60\x0A")
        self.machine.run_cycles(1)
        self.assertEqual(0xA, self.cpu.v[0x0])
        self.machine.load_rom(b"\x61\x0B")
        self.assertEqual(0x0, self.cpu.v[0x0])
        self.assertEqual(0x200, self.cpu.pc)
        self.machine.run_cycles(1)
        self.assertEqual(0xB, self.cpu.v[0x1])

    def test_machine_render(self):
        self.machine.render()
        self.assertEqual(64 * 32, len(self.renderer.pixels))
        self.assertEqual(1, self.renderer.refreshes)
        self.machine.render()  # Nothing drawn since, so no refresh
        self.assertEqual(1, self.renderer.refreshes)
        self.machine.load_rom(b"\xD0\x05")
        self.machine.run_cycles(1)
        self.machine.render()
        self.assertEqual(2, self.renderer.refreshes)
        self.assertEqual(1, self.renderer.pixels[0])
        self.assertEqual(0, self.renderer.pixels[4])

    def test_machine_tick_timers(self):
        self.cpu.dt = 10
        self.cpu.st = 1
        self.machine.next_timer_time = 1.0
        self.assertEqual(0, self.machine.tick_timers(0.5))
        self.assertEqual(1, self.machine.tick_timers(1.0))
        self.assertEqual((9, 0), (self.cpu.dt, self.cpu.st))
        self.assertEqual(3, self.machine.tick_timers(1.0 + TIMER_INTERVAL * 3.5))
        self.assertEqual(6, self.cpu.dt)

    def test_machine_tick_timers_catchup_limit(self):
        self.cpu.dt = 200
        self.machine.next_timer_time = 0.0
        self.assertEqual(60, self.machine.tick_timers(10.0))
        self.assertEqual(140, self.cpu.dt)
        self.assertGreater(self.machine.next_timer_time, 10.0)

    def test_machine_run_max_cycles(self):
        self.machine.load_rom(b"\x70\x01\x12\x00")
        self.assertEqual(6, self.machine.run(max_cycles=6))
        self.assertEqual(3, self.cpu.v[0x0])
        self.assertGreaterEqual(self.renderer.refreshes, 1)

    def test_machine_run_until_quit(self):
        inputs = QuittingInputs(DEFAULT_KEYMAP, self.renderer, quit_after=1)
        machine = Machine(self.cpu, self.renderer, inputs, clock_speed=0, clock=self.clock)
        machine.load_rom(b"\x12\x00")
        self.assertEqual(0, machine.run())  # Quit is checked before the first instruction
        self.assertEqual(1, inputs.polls)

    def test_machine_run_quit_later(self):
        inputs = QuittingInputs(DEFAULT_KEYMAP, self.renderer, quit_after=2)
        machine = Machine(self.cpu, self.renderer, inputs, clock_speed=0, clock=self.clock)
        machine.load_rom(b"\xF3\x0A\x12\x02")
        original_step = self.cpu.step
        steps = []

        def step():
            steps.append(self.cpu.pc)
            original_step()

            if len(steps) == 5:
                self.clock.now += 1.0  # Let the next poll happen

        self.cpu.step = step
        self.assertEqual(5, machine.run())
        self.assertEqual(2, inputs.polls)
        # Key 1 was pressed on the first poll, and Fx0A waits for its release
        self.assertEqual(0x1, self.cpu.pressed_key)
        self.assertEqual([0x200] * 5, steps)

    def test_machine_run_undefined_instruction(self):
        self.machine.load_rom(b"\x00\x00")
        self.assertRaises(UndefinedInstruction, self.machine.run, 10)

    def test_machine_pause_toggle(self):
        self.assertFalse(self.machine.paused)
        self.inputs.report_pause()
        self.assertTrue(self.machine.paused)
        self.assertEqual("VChip-8 Emulator - Paused", self.renderer.titles[-1])
        self.inputs.report_pause()
        self.assertFalse(self.machine.paused)
        self.assertIn("FPS", self.renderer.titles[-1])

    def test_machine_run_paused(self):
        inputs = ScriptedInputs(DEFAULT_KEYMAP, self.renderer, [None, "pause", None, None, "pause", None, "quit"])
        machine = Machine(self.cpu, self.renderer, inputs, clock_speed=0, clock=SteppingClock())
        machine.load_rom(b"\x70\x01\x12\x00")
        self.cpu.dt = 100
        # Only the three unpaused polls let an instruction through
        self.assertEqual(3, machine.run())
        self.assertEqual(2, self.cpu.v[0x0])
        # One timer tick per running frame, with nothing made up for the paused ones
        self.assertEqual(97, self.cpu.dt)
        self.assertFalse(machine.paused)
