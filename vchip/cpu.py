#!/usr/bin/env python3

"""
CPU Emulator (CHIP-8)

Like a real computer, this is where most of the processing happens.  The CPU
owns all of the machine state (RAM, registers, stack, framebuffer, keypad and
timers) and advances it one instruction at a time whenever step() is called.

Nothing in here waits or keeps time.  Whoever drives the CPU decides how often
to call step() and tick_timers(), and reports key changes with set_key().
This keeps the CPU usable from a window, a terminal, or a test case alike.
"""

__copyright__ = "Copyright (C) 2022 Gregory Maynard-Hoare"
__license__ = "GNU Affero General Public License v3.0"

from random import Random
from .constants import (
    MEMORY_SIZE, ADDRESS_MASK, FONT_ADDRESS, FONT_SET, FONT_GLYPH_SIZE, PROGRAM_ADDRESS, STACK_LEVELS, REGISTER_COUNT
)
from .crashdump import describe_state
from .framebuffer import Framebuffer
from .keypad import Keypad
from .quirks import Quirks
from .ram import RAM
from .stack import Stack

CPU_ENDIAN = "big"  # CHIP-8 is big-endian


class CPUError(Exception):
    pass


class UndefinedInstruction(CPUError):
    def __init__(self, opcode, address, state=None):
        self.opcode = opcode
        self.address = address
        message = "Undefined instruction 0x{:04x} at address 0x{:03x}".format(opcode, address)

        if state:
            message = "{}\n\n{}".format(message, state)

        super().__init__(message)


class CPU:
    def __init__(self, quirks=None, rng=None):
        self.quirks = Quirks() if quirks is None else quirks
        self.rng = Random() if rng is None else rng

        self.ram = RAM()
        self.ram.resize(MEMORY_SIZE)
        self.stack = Stack(STACK_LEVELS)
        self.framebuffer = Framebuffer()
        self.keypad = Keypad()

        # Define instruction pointers.
        # n = Nibble
        # kk = Byte
        # nnn = address
        # x/y = register (0-15)
        self.instructions = {
            # Initial lookup for instructions' first nibble
            0x0: self._0nnn,  # Alias for bitmask 0xFFFF
            0x1: self._1nnn,
            0x2: self._2nnn,
            0x3: self._3xkk,
            0x4: self._4xkk,
            0x5: self._5nnn_8nnn_9nnn,  # Alias for bitmask 0xF00F
            0x6: self._6xkk,
            0x7: self._7xkk,
            0x8: self._5nnn_8nnn_9nnn,  # Alias for bitmask 0xF00F
            0x9: self._5nnn_8nnn_9nnn,  # Alias for bitmask 0xF00F
            0xA: self._Annn,
            0xB: self._Bnnn,
            0xC: self._Cxkk,
            0xD: self._Dxyn,
            0xE: self._Ennn_Fnnn,  # Alias for bitmask 0xF0FF
            0xF: self._Ennn_Fnnn,  # Alias for bitmask 0xF0FF
            # Instructions beginning with nibble 0x0, bitmask 0xFFFF (i.e., exact match)
            0x00E0: self._00E0,
            0x00EE: self._00EE,
            # Instructions beginning with nibble 0x5/0x8/0x9, bitmask 0xF00F
            0x5000: self._5xy0,
            0x8000: self._8xy0,
            0x8001: self._8xy1,
            0x8002: self._8xy2,
            0x8003: self._8xy3,
            0x8004: self._8xy4,
            0x8005: self._8xy5,
            0x8006: self._8xy6,
            0x8007: self._8xy7,
            0x800E: self._8xyE,
            0x9000: self._9xy0,
            # Instructions beginning with nibble 0xE/0xF, bitmask 0xF0FF
            0xE09E: self._Ex9E,
            0xE0A1: self._ExA1,
            0xF007: self._Fx07,
            0xF00A: self._Fx0A,
            0xF015: self._Fx15,
            0xF018: self._Fx18,
            0xF01E: self._Fx1E,
            0xF029: self._Fx29,
            0xF033: self._Fx33,
            0xF055: self._Fx55,
            0xF065: self._Fx65
        }

        # Bytearrays are mutable, so this should be fast when a register is updated
        self.v = memoryview(bytearray(REGISTER_COUNT))
        self.reset()

    def reset(self):
        # Put everything back the way it was at power-on.  Quirks and the random source are kept.
        self.ram.protect(0, 0)
        self.ram.clear()
        self.ram.write_block(FONT_ADDRESS, FONT_SET)
        self.ram.protect(FONT_ADDRESS, len(FONT_SET))

        self.v[:] = bytes(REGISTER_COUNT)
        self.i = 0  # Index register
        self.dt = 0  # Delay timer
        self.st = 0  # Sound timer

        # Program counter, plus the current opcode and where it came from for crash reports
        self.pc = PROGRAM_ADDRESS
        self.debug_pc = PROGRAM_ADDRESS
        self.opcode = 0

        self.stack.clear()
        self.framebuffer.clear()
        self.keypad.release_all()
        self.pressed_key = None  # Key latched by Fx0A while waiting for its release

    def load(self, data):
        # No checks on the contents.  Bad opcodes only fail once they are executed.
        self.ram.write_block(PROGRAM_ADDRESS, data)

    def set_key(self, key, pressed):
        self.keypad.set_key(key, pressed)

    def step(self):
        # One complete fetch, decode and execute cycle
        self.debug_pc = self.pc
        self.opcode = self.fetch()
        self.inc_pc()  # Program counter updates after fetch, but before execute
        self.decode_exec()

    def tick_timers(self):
        # Called at 60Hz by the host, independently of the clock speed
        if self.dt > 0:
            self.dt -= 1

        if self.st > 0:
            self.st -= 1

    def fetch(self):
        pc = self.pc
        return int.from_bytes(
            bytes((self.ram.read(pc), self.ram.read((pc + 1) & ADDRESS_MASK))), CPU_ENDIAN, signed=False
        )

    def _call_masked_instruction(self, masked_opcode):
        instruction = self.instructions.get(masked_opcode)

        if instruction is None:
            self._opcode_unsupported()

        instruction()

    def decode_exec(self):
        self._call_masked_instruction((0xF000 & self.opcode) >> 12)

    def inc_pc(self):
        self.pc = (self.pc + 2) & ADDRESS_MASK

    def dec_pc(self):
        # Only used to re-run instructions (e.g. keypress wait).
        self.pc = (self.pc - 2) & ADDRESS_MASK

    # References to Vx, Vy, byte and addr are always in the same opcode position throughout all instructions, so avoid
    # excessive code duplication (ever so slight slowdown).  Don't reference these more than necessary as they are
    # recalculated each time.
    @property
    def vx(self):
        return (self.opcode & 0xF00) >> 8

    @property
    def vy(self):
        return (self.opcode & 0xF0) >> 4

    @property
    def addr(self):
        return self.opcode & 0xFFF

    @property
    def byte(self):
        return self.opcode & 0xFF

    @property
    def nibble(self):
        return self.opcode & 0xF

    def _opcode_unsupported(self):
        raise UndefinedInstruction(self.opcode, self.debug_pc, describe_state(self)) from None

    def _0nnn(self):
        opcode = self.opcode

        if opcode < 0x10:
            # Opcodes 0x0 - 0xF are used internally for indexing the first nibble
            self._opcode_unsupported()

        self._call_masked_instruction(opcode)

    def _5nnn_8nnn_9nnn(self):
        self._call_masked_instruction(self.opcode & 0xF00F)

    def _Ennn_Fnnn(self):
        self._call_masked_instruction(self.opcode & 0xF0FF)

    def _00E0(self):  # CLS
        self.framebuffer.clear()

    def _00EE(self):  # RET
        self.pc = self.stack.pop()

    def _1nnn(self):  # JP addr
        self.pc = self.addr

    def _2nnn(self):  # CALL addr
        self.stack.push(self.pc)
        self.pc = self.addr

    def _3xkk(self):  # SE Vx, byte
        if self.v[self.vx] == self.byte:
            self.inc_pc()

    def _4xkk(self):  # SNE Vx, byte
        if self.v[self.vx] != self.byte:
            self.inc_pc()

    def _5xy0(self):  # SE Vx, Vy
        if self.v[self.vx] == self.v[self.vy]:
            self.inc_pc()

    def _6xkk(self):  # LD Vx, byte
        self.v[self.vx] = self.byte

    def _7xkk(self):  # ADD Vx, byte
        vx = self.vx
        # No carry flag for this one
        self.v[vx] = (self.v[vx] + self.byte) & 0xFF

    def _pre_8xy1_8xy2_8xy3(self):
        if self.quirks.vf_reset:
            self.v[0xF] = 0

    def _8xy0(self):  # LD Vx, Vy
        self.v[self.vx] = self.v[self.vy]

    def _8xy1(self):  # OR Vx, Vy
        self._pre_8xy1_8xy2_8xy3()
        self.v[self.vx] |= self.v[self.vy]

    def _8xy2(self):  # AND Vx, Vy
        self._pre_8xy1_8xy2_8xy3()
        self.v[self.vx] &= self.v[self.vy]

    def _8xy3(self):  # XOR Vx, Vy
        self._pre_8xy1_8xy2_8xy3()
        self.v[self.vx] ^= self.v[self.vy]

    def _8xy4(self):  # ADD Vx, Vy
        val = self.v[self.vx] + self.v[self.vy]
        self.v[self.vx] = val & 0xFF
        self.v[0xF] = int(val > 0xFF)  # Vf is set when carrying

    def _post_8xy5_8xy7(self, val):  # Post-SUB/SUBN
        self.v[self.vx] = val & 0xFF
        # Vf is set when NOT borrowing, and this should happen AFTER Vx is set, as sometimes Vf is specified in the
        # parameters.
        self.v[0xF] = int(val >= 0)

    def _8xy5(self):  # SUB Vx, Vy
        self._post_8xy5_8xy7(self.v[self.vx] - self.v[self.vy])

    def _8xy6(self):  # SHR Vx {, Vy}
        # With shifting quirks, Vx is shifted in place.  Otherwise Vy is copied into Vx first.
        val = self.v[self.vx if self.quirks.shifting else self.vy]
        self.v[self.vx] = val >> 1
        self.v[0xF] = val & 1  # The whole byte gets set just for the flag

    def _8xy7(self):  # SUBN Vx, Vy
        self._post_8xy5_8xy7(self.v[self.vy] - self.v[self.vx])

    def _8xyE(self):  # SHL Vx {, Vy}
        val = self.v[self.vx if self.quirks.shifting else self.vy]
        self.v[self.vx] = (val << 1) & 0xFF
        self.v[0xF] = val >> 7

    def _9xy0(self):  # SNE Vx, Vy
        if self.v[self.vx] != self.v[self.vy]:
            self.inc_pc()

    def _Annn(self):  # LD I, addr
        self.i = self.addr

    def _Bnnn(self):  # JP V0, addr
        # This quirk breaks lots of games if set incorrectly
        vr = self.vx if self.quirks.jumping else 0
        self.pc = (self.v[vr] + self.addr) & ADDRESS_MASK

    def _Cxkk(self):  # RND Vx, byte
        # The ANDing here is intentional.  This is not a random number between 0 and 'byte' inclusive.
        self.v[self.vx] = self.rng.randint(0, 0xFF) & self.byte

    def _Dxyn(self):  # DRW Vx, Vy, nibble
        # The sprite's start always wraps.  The rest of it either wraps or gets clipped at the edges.
        height = self.nibble
        vid_width, vid_height = self.framebuffer.get_vid_size()
        vx_pos = self.v[self.vx] % vid_width
        vy_pos = self.v[self.vy] % vid_height
        clipping = self.quirks.clipping
        collided = False
        i = self.i

        for y in range(height):
            scr_y = y + vy_pos

            if clipping and scr_y >= vid_height:
                break

            spr_data = self.ram.read((i + y) & ADDRESS_MASK)

            for x in range(8):
                scr_x = x + vx_pos

                if clipping and scr_x >= vid_width:
                    break

                if spr_data & (0x80 >> x) and self.framebuffer.xor_pixel(scr_x, scr_y):
                    # Don't stop drawing.  Set the flag, and never unset it for this sprite.
                    collided = True

        self.v[0xF] = int(collided)

    def _Ex9E(self):  # SKP Vx
        # Only the low nibble selects a key, as there are only 16
        if self.keypad.is_key_down(self.v[self.vx] & 0xF):
            self.inc_pc()

    def _ExA1(self):  # SKNP Vx
        if not self.keypad.is_key_down(self.v[self.vx] & 0xF):
            self.inc_pc()

    def _Fx07(self):  # LD Vx, DT
        self.v[self.vx] = self.dt

    def _Fx0A(self):  # LD Vx, K
        # This opcode waits for a keypress, but since the timers still need to count down and the framebuffer still
        # needs displaying, we'll return control to the host and simply decrement the incremented program counter.
        release_quirks = self.quirks.release
        done = False

        if not release_quirks or self.pressed_key is None:
            key = self.keypad.first_key_down()

            if key is not None:
                self.v[self.vx] = key

                if release_quirks:
                    self.pressed_key = key  # Now wait for it to come back up
                else:
                    done = True
        elif not self.keypad.is_key_down(self.pressed_key):
            self.pressed_key = None
            done = True

        if not done:
            # We need to come back here on the next instruction
            self.dec_pc()

    def _Fx15(self):  # LD DT, Vx
        self.dt = self.v[self.vx]

    def _Fx18(self):  # LD ST, Vx
        self.st = self.v[self.vx]

    def _Fx1E(self):  # ADD I, Vx
        self.i = (self.i + self.v[self.vx]) & ADDRESS_MASK

    def _Fx29(self):  # LD F, Vx
        self.i = (FONT_ADDRESS + FONT_GLYPH_SIZE * (self.v[self.vx] & 0xF)) & ADDRESS_MASK

    def _store(self, location, byte):
        # Stores into the font are dropped, so the glyphs survive without stopping the program
        location &= ADDRESS_MASK

        if not self.ram.is_protected(location):
            self.ram.write(location, byte)

    def _Fx33(self):  # LD B, Vx
        val = self.v[self.vx]
        i = self.i
        self._store(i, val // 100)             # Most-significant digit
        self._store(i + 1, (val // 10) % 10)   # Middle digit
        self._store(i + 2, val % 10)           # Least-significant digit

    def _post_Fx55_Fx65(self):
        if self.quirks.memory:
            self.i = (self.i + self.vx + 1) & ADDRESS_MASK

    def _Fx55(self):  # LD [I], Vx
        i = self.i

        for reg in range(self.vx + 1):
            self._store(i + reg, self.v[reg])

        self._post_Fx55_Fx65()

    def _Fx65(self):  # LD Vx, [I]
        i = self.i

        for reg in range(self.vx + 1):
            self.v[reg] = self.ram.read((i + reg) & ADDRESS_MASK)

        self._post_Fx55_Fx65()
