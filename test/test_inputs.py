#!/usr/bin/env python3

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

import unittest
from vchip.constants import DEFAULT_KEYMAP
from vchip.inputs.i_null import Inputs, InputsError
from vchip.renderers.r_null import Renderer


class TestInputs(unittest.TestCase):
    def setUp(self):
        self.events = []
        self.inputs = Inputs(DEFAULT_KEYMAP, Renderer(), lambda key, pressed: self.events.append((key, pressed)))

    def test_inputs_keymap(self):
        self.assertEqual(0x0, self.inputs.keymap_dict[120])
        self.assertEqual(0xF, self.inputs.keymap_dict[118])
        self.assertEqual(16, len(self.inputs.keymap_dict))

    def test_inputs_report_key(self):
        self.assertEqual(0xC, self.inputs.report_key(52, True))
        self.assertEqual(0xC, self.inputs.report_key(52, False))
        self.assertIsNone(self.inputs.report_key(0, True))
        self.assertEqual([(0xC, True), (0xC, False)], self.events)

    def test_inputs_no_handler(self):
        inputs = Inputs(DEFAULT_KEYMAP, Renderer())
        self.assertEqual(0x1, inputs.report_key(49, True))

    def test_inputs_process_messages(self):
        self.assertFalse(self.inputs.process_messages())
        self.inputs.shutdown()

    def test_inputs_bad_keymaps(self):
        self.assertRaises(InputsError, Inputs, "1,2,3", Renderer())
        self.assertRaises(InputsError, Inputs, ",".join(["1"] * 16), Renderer())
        self.assertRaises(InputsError, Inputs, ",".join(["a"] + [str(i) for i in range(15)]), Renderer())

    def test_inputs_report_pause(self):
        pauses = []
        self.inputs.report_pause()  # No handler yet
        self.inputs.set_pause_handler(lambda: pauses.append(True))
        self.inputs.report_pause()
        self.assertEqual([True], pauses)
