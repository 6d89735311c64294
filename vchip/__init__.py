#!/usr/bin/env python3

"""
Main Startup Module

Simply call main(args) to start the emulator, replacing args with a dictionary
of options.  This can be done via the Terminal or GUI.

All options must be supplied.  Defaults can be specified with a 'None'.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

from .constants import APP_INTRO, APP_COPYRIGHT, CPU_QUIRKS, DEFAULT_CLOCK_SPEED, DEFAULT_QUIRK_PRESET
from .cpu import CPU
from .hostio import Loader
from .machine import Machine
from .quirks import Quirks


class StartupError(Exception):
    pass


def build_quirks(args):
    overrides = {}

    for cpu_quirk in CPU_QUIRKS:
        quirk_setting = args.get("{}_quirks".format(cpu_quirk))
        overrides[cpu_quirk] = None if quirk_setting is None else bool(quirk_setting)

    return Quirks.from_preset(args.get("quirks") or DEFAULT_QUIRK_PRESET, **overrides)


def main(args):
    print("".join((APP_INTRO, APP_COPYRIGHT)))
    opt_renderer = args["renderer"]

    if opt_renderer is None or opt_renderer == "pygame":
        # pylint: disable=unused-import, import-outside-toplevel, raise-missing-from
        try:
            import pygame  # noqa: F401
        except ImportError:
            raise StartupError(
                "PyGame does not appear to be installed.  Install it, or use the null renderer."
            )
        else:
            from .inputs.i_pygame import Inputs
            from .renderers.r_pygame import Renderer
    elif opt_renderer == "null":
        # pylint: disable=import-outside-toplevel
        from .inputs.i_null import Inputs
        from .renderers.r_null import Renderer
    else:
        raise StartupError("Unknown renderer '{}'".format(opt_renderer))

    quirks = build_quirks(args)
    print("Quirks: {}".format(", ".join(
        "{}={}".format(name, int(enabled)) for name, enabled in quirks.as_dict().items()
    )))

    try:
        rom = Loader().load_binary(args["filename"])
    except OSError as e:
        raise StartupError("Unable to read ROM '{}': {}".format(args["filename"], e.strerror)) from None

    cpu = CPU(quirks)

    renderer = Renderer(
        scale=args["scale"],
        pygame_palette=args["pygame_palette"],
        smoothing=args["smoothing"]
    )

    # Set up host inputs, and link to the chosen rendering module in case it provides inputs too
    inputs = Inputs(args["keymap"], renderer)
    clock_speed = DEFAULT_CLOCK_SPEED if args["clock_speed"] is None else args["clock_speed"]
    machine = Machine(cpu, renderer, inputs, clock_speed=clock_speed)
    machine.load_rom(rom)

    try:
        cycles = machine.run(args.get("cycles"))
    finally:
        # The machine has stopped, so shut down the rendering framework.  __del__ cannot be relied upon when using PyPy
        inputs.shutdown()
        renderer.shutdown()

    return cycles
