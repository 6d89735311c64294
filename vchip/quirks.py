#!/usr/bin/env python3

"""
CPU Quirks

Historical interpreters disagree on what a handful of instructions do.  Each
quirk is a simple on/off switch, fixed when the CPU is created:

- vf_reset : 8xy1/8xy2/8xy3 zero Vf before the logic operation.
- memory   : Fx55/Fx65 leave I pointing past the last register touched.
- clipping : Sprites are cut off at the screen edges instead of wrapping.
- shifting : 8xy6/8xyE shift Vx in place, ignoring Vy.
- jumping  : Bnnn adds Vx (x being the high nibble of nnn) instead of V0.
- release  : Fx0A waits for a key to be pressed and then released.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

from .constants import CPU_QUIRKS, QUIRK_PRESETS, DEFAULT_QUIRK_PRESET


class QuirksError(Exception):
    pass


class Quirks:
    __slots__ = CPU_QUIRKS

    def __init__(self, vf_reset=None, memory=None, clipping=None, shifting=None, jumping=None, release=None):
        settings = (vf_reset, memory, clipping, shifting, jumping, release)

        for name, default, setting in zip(CPU_QUIRKS, QUIRK_PRESETS[DEFAULT_QUIRK_PRESET], settings):
            object.__setattr__(self, name, default if setting is None else bool(setting))

    @classmethod
    def from_preset(cls, preset, **overrides):
        # Overrides set to None keep the preset value, so parsed command line options can be passed straight through
        try:
            preset_values = QUIRK_PRESETS[preset]
        except KeyError:
            raise QuirksError("Unknown quirk preset '{}'".format(preset)) from None

        for name in overrides:
            if name not in CPU_QUIRKS:
                raise QuirksError("Unknown quirk '{}'".format(name))

        settings = {}

        for name, preset_value in zip(CPU_QUIRKS, preset_values):
            override = overrides.get(name)
            settings[name] = preset_value if override is None else override

        return cls(**settings)

    def __setattr__(self, name, value):
        raise QuirksError("Quirks cannot be changed once set")

    def as_dict(self):
        return {name: getattr(self, name) for name in CPU_QUIRKS}

    def __eq__(self, other):
        if not isinstance(other, Quirks):
            return NotImplemented

        return self.as_dict() == other.as_dict()

    def __repr__(self):
        return "Quirks({})".format(", ".join("{}={}".format(name, getattr(self, name)) for name in CPU_QUIRKS))
