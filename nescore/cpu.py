import dataclasses
import enum
import logging
import typing

logger = logging.getLogger(__name__)

ADC = 'ADC'
AND = 'AND'
ASL = 'ASL'
BCC = 'BCC'
BCS = 'BCS'
BEQ = 'BEQ'
BIT = 'BIT'
BMI = 'BMI'
BNE = 'BNE'
BPL = 'BPL'
BRK = 'BRK'
BVC = 'BVC'
BVS = 'BVS'
CLC = 'CLC'
CLD = 'CLD'
CLI = 'CLI'
CLV = 'CLV'
CMP = 'CMP'
CPX = 'CPX'
CPY = 'CPY'
DEC = 'DEC'
DEX = 'DEX'
DEY = 'DEY'
EOR = 'EOR'
INC = 'INC'
INX = 'INX'
INY = 'INY'
JMP = 'JMP'
JSR = 'JSR'
LDA = 'LDA'
LDX = 'LDX'
LDY = 'LDY'
LSR = 'LSR'
NOP = 'NOP'
ORA = 'ORA'
PHA = 'PHA'
PHP = 'PHP'
PLA = 'PLA'
PLP = 'PLP'
ROL = 'ROL'
ROR = 'ROR'
RTI = 'RTI'
RTS = 'RTS'
SBC = 'SBC'
SEC = 'SEC'
SED = 'SED'
SEI = 'SEI'
STA = 'STA'
STX = 'STX'
STY = 'STY'
TAX = 'TAX'
TAY = 'TAY'
TSX = 'TSX'
TXA = 'TXA'
TXS = 'TXS'
TYA = 'TYA'

# Undocumented
AAX = 'AAX'
DCP = 'DCP'
ISC = 'ISC'
LAX = 'LAX'
RLA = 'RLA'
RRA = 'RRA'
SKB = 'SKB'
SKW = 'SKW'
SLO = 'SLO'
SRE = 'SRE'


class UnknownOpcodeError(Exception):

    def __init__(self, opcode: int, pc: int):
        super().__init__(f'unknown opcode {opcode:02X} at {pc:04X}')
        self.opcode = opcode
        self.pc = pc


class Flag(enum.IntFlag):
    CARRY = enum.auto()
    ZERO = enum.auto()
    INTERRUPT = enum.auto()
    DECIMAL = enum.auto()
    BREAK = enum.auto()
    UNUSED = enum.auto()
    OVERFLOW = enum.auto()
    NEGATIVE = enum.auto()


class AddressMode(enum.Enum):
    ACCUMULATOR = enum.auto()
    IMPLIED = enum.auto()
    IMMEDIATE = enum.auto()
    RELATIVE = enum.auto()
    ZEROPAGE = enum.auto()
    ZEROPAGE_X = enum.auto()
    ZEROPAGE_Y = enum.auto()
    ABSOLUTE = enum.auto()
    ABSOLUTE_X = enum.auto()
    ABSOLUTE_Y = enum.auto()
    INDIRECT = enum.auto()
    INDIRECT_X = enum.auto()
    INDIRECT_Y = enum.auto()


class Bus(typing.Protocol):

    def read(self, address: int) -> int:
        ...

    def write(self, address: int, data: int) -> None:
        ...


class CPUObserver(typing.Protocol):

    def on_begin(self, cpu: 'CPU') -> None:
        ...

    def on_fetch(self, cpu: 'CPU', value: int) -> None:
        ...

    def on_step(self, cpu: 'CPU', cycles: int) -> None:
        ...


@dataclasses.dataclass(frozen=True, slots=True)
class InstructionContext:
    address: int | None
    value: int | None


@dataclasses.dataclass(frozen=True, slots=True)
class Instruction:
    mnemonic: str
    cycles: int
    address_mode: AddressMode
    get_context: typing.Callable[[], InstructionContext]
    check_page_cross: bool
    execute: typing.Callable[[], None]
    documented: bool = True


_IMP = AddressMode.IMPLIED
_ACC = AddressMode.ACCUMULATOR
_IMM = AddressMode.IMMEDIATE
_REL = AddressMode.RELATIVE
_ZP = AddressMode.ZEROPAGE
_ZPX = AddressMode.ZEROPAGE_X
_ZPY = AddressMode.ZEROPAGE_Y
_ABS = AddressMode.ABSOLUTE
_ABX = AddressMode.ABSOLUTE_X
_ABY = AddressMode.ABSOLUTE_Y
_IND = AddressMode.INDIRECT
_IZX = AddressMode.INDIRECT_X
_IZY = AddressMode.INDIRECT_Y

# opcode, mnemonic, address mode, base cycles, +1 cycle on page cross
_OPCODES = (
    (0x69, ADC, _IMM, 2, False),
    (0x65, ADC, _ZP, 3, False),
    (0x75, ADC, _ZPX, 4, False),
    (0x6D, ADC, _ABS, 4, False),
    (0x7D, ADC, _ABX, 4, True),
    (0x79, ADC, _ABY, 4, True),
    (0x61, ADC, _IZX, 6, False),
    (0x71, ADC, _IZY, 5, True),
    (0x29, AND, _IMM, 2, False),
    (0x25, AND, _ZP, 3, False),
    (0x35, AND, _ZPX, 4, False),
    (0x2D, AND, _ABS, 4, False),
    (0x3D, AND, _ABX, 4, True),
    (0x39, AND, _ABY, 4, True),
    (0x21, AND, _IZX, 6, False),
    (0x31, AND, _IZY, 5, True),
    (0x0A, ASL, _ACC, 2, False),
    (0x06, ASL, _ZP, 5, False),
    (0x16, ASL, _ZPX, 6, False),
    (0x0E, ASL, _ABS, 6, False),
    (0x1E, ASL, _ABX, 7, False),
    (0x90, BCC, _REL, 2, False),
    (0xB0, BCS, _REL, 2, False),
    (0xF0, BEQ, _REL, 2, False),
    (0x30, BMI, _REL, 2, False),
    (0xD0, BNE, _REL, 2, False),
    (0x10, BPL, _REL, 2, False),
    (0x50, BVC, _REL, 2, False),
    (0x70, BVS, _REL, 2, False),
    (0x24, BIT, _ZP, 3, False),
    (0x2C, BIT, _ABS, 4, False),
    (0x00, BRK, _IMP, 7, False),
    (0x18, CLC, _IMP, 2, False),
    (0xD8, CLD, _IMP, 2, False),
    (0x58, CLI, _IMP, 2, False),
    (0xB8, CLV, _IMP, 2, False),
    (0xC9, CMP, _IMM, 2, False),
    (0xC5, CMP, _ZP, 3, False),
    (0xD5, CMP, _ZPX, 4, False),
    (0xCD, CMP, _ABS, 4, False),
    (0xDD, CMP, _ABX, 4, True),
    (0xD9, CMP, _ABY, 4, True),
    (0xC1, CMP, _IZX, 6, False),
    (0xD1, CMP, _IZY, 5, True),
    (0xE0, CPX, _IMM, 2, False),
    (0xE4, CPX, _ZP, 3, False),
    (0xEC, CPX, _ABS, 4, False),
    (0xC0, CPY, _IMM, 2, False),
    (0xC4, CPY, _ZP, 3, False),
    (0xCC, CPY, _ABS, 4, False),
    (0xC6, DEC, _ZP, 5, False),
    (0xD6, DEC, _ZPX, 6, False),
    (0xCE, DEC, _ABS, 6, False),
    (0xDE, DEC, _ABX, 7, False),
    (0xCA, DEX, _IMP, 2, False),
    (0x88, DEY, _IMP, 2, False),
    (0x49, EOR, _IMM, 2, False),
    (0x45, EOR, _ZP, 3, False),
    (0x55, EOR, _ZPX, 4, False),
    (0x4D, EOR, _ABS, 4, False),
    (0x5D, EOR, _ABX, 4, True),
    (0x59, EOR, _ABY, 4, True),
    (0x41, EOR, _IZX, 6, False),
    (0x51, EOR, _IZY, 5, True),
    (0xE6, INC, _ZP, 5, False),
    (0xF6, INC, _ZPX, 6, False),
    (0xEE, INC, _ABS, 6, False),
    (0xFE, INC, _ABX, 7, False),
    (0xE8, INX, _IMP, 2, False),
    (0xC8, INY, _IMP, 2, False),
    (0x4C, JMP, _ABS, 3, False),
    (0x6C, JMP, _IND, 5, False),
    (0x20, JSR, _ABS, 6, False),
    (0xA9, LDA, _IMM, 2, False),
    (0xA5, LDA, _ZP, 3, False),
    (0xB5, LDA, _ZPX, 4, False),
    (0xAD, LDA, _ABS, 4, False),
    (0xBD, LDA, _ABX, 4, True),
    (0xB9, LDA, _ABY, 4, True),
    (0xA1, LDA, _IZX, 6, False),
    (0xB1, LDA, _IZY, 5, True),
    (0xA2, LDX, _IMM, 2, False),
    (0xA6, LDX, _ZP, 3, False),
    (0xB6, LDX, _ZPY, 4, False),
    (0xAE, LDX, _ABS, 4, False),
    (0xBE, LDX, _ABY, 4, True),
    (0xA0, LDY, _IMM, 2, False),
    (0xA4, LDY, _ZP, 3, False),
    (0xB4, LDY, _ZPX, 4, False),
    (0xAC, LDY, _ABS, 4, False),
    (0xBC, LDY, _ABX, 4, True),
    (0x4A, LSR, _ACC, 2, False),
    (0x46, LSR, _ZP, 5, False),
    (0x56, LSR, _ZPX, 6, False),
    (0x4E, LSR, _ABS, 6, False),
    (0x5E, LSR, _ABX, 7, False),
    (0xEA, NOP, _IMP, 2, False),
    (0x09, ORA, _IMM, 2, False),
    (0x05, ORA, _ZP, 3, False),
    (0x15, ORA, _ZPX, 4, False),
    (0x0D, ORA, _ABS, 4, False),
    (0x1D, ORA, _ABX, 4, True),
    (0x19, ORA, _ABY, 4, True),
    (0x01, ORA, _IZX, 6, False),
    (0x11, ORA, _IZY, 5, True),
    (0x48, PHA, _IMP, 3, False),
    (0x08, PHP, _IMP, 3, False),
    (0x68, PLA, _IMP, 4, False),
    (0x28, PLP, _IMP, 4, False),
    (0x2A, ROL, _ACC, 2, False),
    (0x26, ROL, _ZP, 5, False),
    (0x36, ROL, _ZPX, 6, False),
    (0x2E, ROL, _ABS, 6, False),
    (0x3E, ROL, _ABX, 7, False),
    (0x6A, ROR, _ACC, 2, False),
    (0x66, ROR, _ZP, 5, False),
    (0x76, ROR, _ZPX, 6, False),
    (0x6E, ROR, _ABS, 6, False),
    (0x7E, ROR, _ABX, 7, False),
    (0x40, RTI, _IMP, 6, False),
    (0x60, RTS, _IMP, 6, False),
    (0xE9, SBC, _IMM, 2, False),
    (0xE5, SBC, _ZP, 3, False),
    (0xF5, SBC, _ZPX, 4, False),
    (0xED, SBC, _ABS, 4, False),
    (0xFD, SBC, _ABX, 4, True),
    (0xF9, SBC, _ABY, 4, True),
    (0xE1, SBC, _IZX, 6, False),
    (0xF1, SBC, _IZY, 5, True),
    (0x38, SEC, _IMP, 2, False),
    (0xF8, SED, _IMP, 2, False),
    (0x78, SEI, _IMP, 2, False),
    (0x85, STA, _ZP, 3, False),
    (0x95, STA, _ZPX, 4, False),
    (0x8D, STA, _ABS, 4, False),
    (0x9D, STA, _ABX, 5, False),
    (0x99, STA, _ABY, 5, False),
    (0x81, STA, _IZX, 6, False),
    (0x91, STA, _IZY, 6, False),
    (0x86, STX, _ZP, 3, False),
    (0x96, STX, _ZPY, 4, False),
    (0x8E, STX, _ABS, 4, False),
    (0x84, STY, _ZP, 3, False),
    (0x94, STY, _ZPX, 4, False),
    (0x8C, STY, _ABS, 4, False),
    (0xAA, TAX, _IMP, 2, False),
    (0xA8, TAY, _IMP, 2, False),
    (0xBA, TSX, _IMP, 2, False),
    (0x8A, TXA, _IMP, 2, False),
    (0x9A, TXS, _IMP, 2, False),
    (0x98, TYA, _IMP, 2, False),
)

_UNDOCUMENTED_OPCODES = (
    (0x1A, NOP, _IMP, 2, False),
    (0x3A, NOP, _IMP, 2, False),
    (0x5A, NOP, _IMP, 2, False),
    (0x7A, NOP, _IMP, 2, False),
    (0xDA, NOP, _IMP, 2, False),
    (0xFA, NOP, _IMP, 2, False),
    (0x80, SKB, _IMM, 2, False),
    (0x82, SKB, _IMM, 2, False),
    (0x89, SKB, _IMM, 2, False),
    (0xC2, SKB, _IMM, 2, False),
    (0xE2, SKB, _IMM, 2, False),
    (0x04, SKB, _ZP, 3, False),
    (0x44, SKB, _ZP, 3, False),
    (0x64, SKB, _ZP, 3, False),
    (0x14, SKB, _ZPX, 4, False),
    (0x34, SKB, _ZPX, 4, False),
    (0x54, SKB, _ZPX, 4, False),
    (0x74, SKB, _ZPX, 4, False),
    (0xD4, SKB, _ZPX, 4, False),
    (0xF4, SKB, _ZPX, 4, False),
    (0x0C, SKW, _ABS, 4, False),
    (0x1C, SKW, _ABX, 4, True),
    (0x3C, SKW, _ABX, 4, True),
    (0x5C, SKW, _ABX, 4, True),
    (0x7C, SKW, _ABX, 4, True),
    (0xDC, SKW, _ABX, 4, True),
    (0xFC, SKW, _ABX, 4, True),
    (0xA7, LAX, _ZP, 3, False),
    (0xB7, LAX, _ZPY, 4, False),
    (0xAF, LAX, _ABS, 4, False),
    (0xBF, LAX, _ABY, 4, True),
    (0xA3, LAX, _IZX, 6, False),
    (0xB3, LAX, _IZY, 5, True),
    (0x87, AAX, _ZP, 3, False),
    (0x97, AAX, _ZPY, 4, False),
    (0x8F, AAX, _ABS, 4, False),
    (0x83, AAX, _IZX, 6, False),
    (0xEB, SBC, _IMM, 2, False),
    (0xC7, DCP, _ZP, 5, False),
    (0xD7, DCP, _ZPX, 6, False),
    (0xCF, DCP, _ABS, 6, False),
    (0xDF, DCP, _ABX, 7, False),
    (0xDB, DCP, _ABY, 7, False),
    (0xC3, DCP, _IZX, 8, False),
    (0xD3, DCP, _IZY, 8, False),
    (0xE7, ISC, _ZP, 5, False),
    (0xF7, ISC, _ZPX, 6, False),
    (0xEF, ISC, _ABS, 6, False),
    (0xFF, ISC, _ABX, 7, False),
    (0xFB, ISC, _ABY, 7, False),
    (0xE3, ISC, _IZX, 8, False),
    (0xF3, ISC, _IZY, 8, False),
    (0x07, SLO, _ZP, 5, False),
    (0x17, SLO, _ZPX, 6, False),
    (0x0F, SLO, _ABS, 6, False),
    (0x1F, SLO, _ABX, 7, False),
    (0x1B, SLO, _ABY, 7, False),
    (0x03, SLO, _IZX, 8, False),
    (0x13, SLO, _IZY, 8, False),
    (0x27, RLA, _ZP, 5, False),
    (0x37, RLA, _ZPX, 6, False),
    (0x2F, RLA, _ABS, 6, False),
    (0x3F, RLA, _ABX, 7, False),
    (0x3B, RLA, _ABY, 7, False),
    (0x23, RLA, _IZX, 8, False),
    (0x33, RLA, _IZY, 8, False),
    (0x47, SRE, _ZP, 5, False),
    (0x57, SRE, _ZPX, 6, False),
    (0x4F, SRE, _ABS, 6, False),
    (0x5F, SRE, _ABX, 7, False),
    (0x5B, SRE, _ABY, 7, False),
    (0x43, SRE, _IZX, 8, False),
    (0x53, SRE, _IZY, 8, False),
    (0x67, RRA, _ZP, 5, False),
    (0x77, RRA, _ZPX, 6, False),
    (0x6F, RRA, _ABS, 6, False),
    (0x7F, RRA, _ABX, 7, False),
    (0x7B, RRA, _ABY, 7, False),
    (0x63, RRA, _IZX, 8, False),
    (0x73, RRA, _IZY, 8, False),
)


class CPU:

    _STACK_BASE_ADDR = 0x0100
    _NMI_VECTOR_ADDR = 0xFFFA
    _RESET_VECTOR_ADDR = 0xFFFC
    _IRQ_VECTOR_ADDR = 0xFFFE
    _BRK_OPCODE = 0x00
    _INTERRUPT_CYCLES = 7

    __slots__ = ('_a', '_x', '_y', '_sp', '_flags', '_pc', '_bus',
                 '_curr_cycles', '_total_cycles', '_instruction', '_context',
                 '_page_crossed', '_instructions_set', '_halt_on_brk',
                 'observer')

    def __init__(self,
                 bus: Bus,
                 observer: CPUObserver | None = None,
                 halt_on_brk: bool = True):
        self._a = 0x00
        self._x = 0x00
        self._y = 0x00
        self._sp = 0x00
        self._flags = Flag(0)
        self._pc = 0x0000

        self._bus = bus
        self._curr_cycles = 0
        self._total_cycles = 0
        self._instruction: Instruction | None = None
        self._context: InstructionContext | None = None
        self._page_crossed = False
        self._halt_on_brk = halt_on_brk
        self._instructions_set = self._init_instructions()
        self.observer = observer

        self.reset()

    @property
    def a(self) -> int:
        return self._a

    @a.setter
    def a(self, value: int) -> None:
        self._a = value & 0xFF

    @property
    def x(self) -> int:
        return self._x

    @x.setter
    def x(self, value: int) -> None:
        self._x = value & 0xFF

    @property
    def y(self) -> int:
        return self._y

    @y.setter
    def y(self, value: int) -> None:
        self._y = value & 0xFF

    @property
    def pc(self) -> int:
        return self._pc

    @pc.setter
    def pc(self, value: int) -> None:
        self._pc = value & 0xFFFF

    @property
    def sp(self) -> int:
        return self._sp

    @sp.setter
    def sp(self, value: int) -> None:
        self._sp = value & 0xFF

    @property
    def flags(self) -> Flag:
        return self._flags

    @flags.setter
    def flags(self, value: int) -> None:
        self._flags = Flag(value & 0xFF)

    @property
    def status(self) -> int:
        return int(self._flags | Flag.UNUSED)

    @property
    def total_cycles(self) -> int:
        return self._total_cycles

    def reset(self, pc: int | None = None) -> None:
        self._a = 0x00
        self._x = 0x00
        self._y = 0x00
        self._sp = 0xFD
        if pc is not None:
            self._pc = pc & 0xFFFF
        else:
            self._pc = self._read_word(self._RESET_VECTOR_ADDR)
        self._flags = Flag.INTERRUPT | Flag.UNUSED
        self._total_cycles = 7
        return None

    def decode(self, opcode: int) -> Instruction | None:
        return self._instructions_set[opcode & 0xFF]

    def fetch(self) -> int:
        data = self._bus.read(self._pc)
        self._pc = (self._pc + 1) & 0xFFFF
        if self.observer is not None:
            self.observer.on_fetch(self, data)
        return data

    def step(self) -> int | None:
        pc = self._pc
        if self.observer is not None:
            self.observer.on_begin(self)
        opcode = self.fetch()
        if opcode == self._BRK_OPCODE and self._halt_on_brk:
            return None
        instruction = self._instructions_set[opcode]
        if instruction is None:
            raise UnknownOpcodeError(opcode, pc)
        self._instruction = instruction
        self._curr_cycles = instruction.cycles
        self._page_crossed = False
        self._context = instruction.get_context()
        instruction.execute()
        if instruction.check_page_cross and self._page_crossed:
            self._curr_cycles += 1
        self._total_cycles += self._curr_cycles
        if self.observer is not None:
            self.observer.on_step(self, self._curr_cycles)
        return self._curr_cycles

    def nmi(self) -> int:
        self._interrupt(self._NMI_VECTOR_ADDR)
        return self._INTERRUPT_CYCLES

    def irq(self) -> int:
        if self._flags & Flag.INTERRUPT:
            return 0
        self._interrupt(self._IRQ_VECTOR_ADDR)
        return self._INTERRUPT_CYCLES

    def _interrupt(self, vector: int) -> None:
        logger.debug('interrupt via %04X from %04X', vector, self._pc)
        self._push_word(self._pc)
        self._push_stack(int(self._flags & ~Flag.BREAK | Flag.UNUSED))
        self._flags |= Flag.INTERRUPT
        self._pc = self._read_word(vector)
        self._total_cycles += self._INTERRUPT_CYCLES

    def _read_word(self, address: int) -> int:
        return self._bus.read(address) | self._bus.read(address + 1) << 8

    def _fetch_word(self) -> int:
        return self.fetch() | self.fetch() << 8

    def _is_page_crossed(self, address1: int, address2: int) -> bool:
        return address1 & 0xFF00 != address2 & 0xFF00

    def _read_address_around_page(self, address: int) -> int:
        pointer = self._bus.read(address)
        if self._is_page_crossed(address, address + 1):
            # The high byte never leaves the pointer's page
            pointer |= self._bus.read(address & 0xFF00) << 8
        else:
            pointer |= self._bus.read(address + 1) << 8
        return pointer

    def _get_accumulator_context(self) -> InstructionContext:
        return InstructionContext(None, self._a)

    def _get_implied_context(self) -> InstructionContext:
        return InstructionContext(None, None)

    def _get_immediate_context(self) -> InstructionContext:
        return InstructionContext(None, self.fetch())

    def __resolve_zeropage_context(self, index: int) -> InstructionContext:
        return InstructionContext((self.fetch() + index) & 0xFF, None)

    def _get_zeropage_context(self) -> InstructionContext:
        return self.__resolve_zeropage_context(0)

    def _get_zeropage_x_context(self) -> InstructionContext:
        return self.__resolve_zeropage_context(self._x)

    def _get_zeropage_y_context(self) -> InstructionContext:
        return self.__resolve_zeropage_context(self._y)

    def __resolve_absolute_context(self, index: int) -> InstructionContext:
        operand = self._fetch_word()
        effective_address = (operand + index) & 0xFFFF
        self._page_crossed = self._is_page_crossed(operand, effective_address)
        return InstructionContext(effective_address, None)

    def _get_absolute_context(self) -> InstructionContext:
        return self.__resolve_absolute_context(0)

    def _get_absolute_x_context(self) -> InstructionContext:
        return self.__resolve_absolute_context(self._x)

    def _get_absolute_y_context(self) -> InstructionContext:
        return self.__resolve_absolute_context(self._y)

    def _get_indirect_context(self) -> InstructionContext:
        operand = self._fetch_word()
        return InstructionContext(self._read_address_around_page(operand),
                                  None)

    def _get_indirect_x_context(self) -> InstructionContext:
        zeropage_addr = (self.fetch() + self._x) & 0xFF
        return InstructionContext(
            self._read_address_around_page(zeropage_addr), None)

    def _get_indirect_y_context(self) -> InstructionContext:
        base_addr = self._read_address_around_page(self.fetch())
        effective_address = (base_addr + self._y) & 0xFFFF
        self._page_crossed = self._is_page_crossed(base_addr,
                                                   effective_address)
        return InstructionContext(effective_address, None)

    def _get_relative_context(self) -> InstructionContext:
        return InstructionContext(None, self.fetch())

    def _calc_signed_address_offset(self, offset: int) -> int:
        return offset - 0x0100 if offset & 0x80 else offset

    def _resolve_stack_address(self) -> int:
        return self._STACK_BASE_ADDR | self._sp

    def _push_stack(self, data: int) -> None:
        self._bus.write(self._resolve_stack_address(), data)
        self._sp = (self._sp - 1) & 0xFF
        return None

    def _pop_stack(self) -> int:
        self._sp = (self._sp + 1) & 0xFF
        return self._bus.read(self._resolve_stack_address())

    def _push_word(self, data: int) -> None:
        self._push_stack(data >> 8 & 0xFF)
        self._push_stack(data & 0xFF)

    def _pop_word(self) -> int:
        return self._pop_stack() | self._pop_stack() << 8

    def _set_flag(self, flag: Flag, value: int) -> None:
        if value:
            self._flags |= flag
        else:
            self._flags &= ~flag

    def _carry(self) -> int:
        return 1 if self._flags & Flag.CARRY else 0

    def _set_nz_flags(self, data: int) -> None:
        self._set_flag(Flag.ZERO, int(data == 0))
        self._set_flag(Flag.NEGATIVE, int(data >> 7 & 1))

    def _read_operand(self) -> int:
        if self._context.address is None:
            return self._context.value
        return self._bus.read(self._context.address)

    def _store(self, data: int) -> None:
        if self._instruction.address_mode is AddressMode.ACCUMULATOR:
            self._a = data
        else:
            self._bus.write(self._context.address, data)

    def _shift_left(self, value: int) -> int:
        self._set_flag(Flag.CARRY, value >> 7)
        return value << 1 & 0xFF

    def _shift_right(self, value: int) -> int:
        self._set_flag(Flag.CARRY, value & 1)
        return value >> 1

    def _rotate_left(self, value: int) -> int:
        rotated = (value << 1 | self._carry()) & 0xFF
        self._set_flag(Flag.CARRY, value >> 7)
        return rotated

    def _rotate_right(self, value: int) -> int:
        rotated = (value >> 1 | self._carry() << 7) & 0xFF
        self._set_flag(Flag.CARRY, value & 1)
        return rotated

    def _brk(self) -> None:
        logger.debug('BRK at %04X', (self._pc - 1) & 0xFFFF)
        # BRK skips a padding byte
        self._push_word((self._pc + 1) & 0xFFFF)
        self._push_stack(int(self._flags | Flag.BREAK | Flag.UNUSED))
        self._flags |= Flag.INTERRUPT
        self._pc = self._read_word(self._IRQ_VECTOR_ADDR)

    def _ora(self) -> None:
        self._a |= self._read_operand()
        self._set_nz_flags(self._a)

    def _and(self) -> None:
        self._a &= self._read_operand()
        self._set_nz_flags(self._a)

    def _eor(self) -> None:
        self._a ^= self._read_operand()
        self._set_nz_flags(self._a)

    def _asl(self) -> None:
        result = self._shift_left(self._read_operand())
        self._set_nz_flags(result)
        self._store(result)

    def _lsr(self) -> None:
        result = self._shift_right(self._read_operand())
        self._set_nz_flags(result)
        self._store(result)

    def _rol(self) -> None:
        result = self._rotate_left(self._read_operand())
        self._set_nz_flags(result)
        self._store(result)

    def _ror(self) -> None:
        result = self._rotate_right(self._read_operand())
        self._set_nz_flags(result)
        self._store(result)

    def _php(self) -> None:
        self._push_stack(int(self._flags | Flag.BREAK | Flag.UNUSED))

    def _plp(self) -> None:
        self._flags = Flag(self._pop_stack()) & ~Flag.BREAK | Flag.UNUSED

    def _pha(self) -> None:
        self._push_stack(self._a)

    def _pla(self) -> None:
        self._a = self._pop_stack()
        self._set_nz_flags(self._a)

    def _clc(self) -> None:
        self._flags &= ~Flag.CARRY

    def _sec(self) -> None:
        self._flags |= Flag.CARRY

    def _cli(self) -> None:
        self._flags &= ~Flag.INTERRUPT

    def _sei(self) -> None:
        self._flags |= Flag.INTERRUPT

    def _clv(self) -> None:
        self._flags &= ~Flag.OVERFLOW

    def _cld(self) -> None:
        self._flags &= ~Flag.DECIMAL

    def _sed(self) -> None:
        self._flags |= Flag.DECIMAL

    def _bit(self) -> None:
        operand = self._read_operand()
        self._set_flag(Flag.ZERO, int(self._a & operand == 0))
        self._set_flag(Flag.OVERFLOW, operand >> 6 & 1)
        self._set_flag(Flag.NEGATIVE, operand >> 7)

    def _rti(self) -> None:
        self._flags = Flag(self._pop_stack()) & ~Flag.BREAK | Flag.UNUSED
        self._pc = self._pop_word()

    def _rts(self) -> None:
        self._pc = (self._pop_word() + 1) & 0xFFFF

    def _jmp(self) -> None:
        self._pc = self._context.address

    def __adc(self, operand: int) -> None:
        result = self._a + operand + self._carry()
        self._set_flag(Flag.CARRY, int(result > 0xFF))
        # Both inputs share a sign the result does not have
        self._set_flag(
            Flag.OVERFLOW,
            int(((self._a ^ result) & (operand ^ result) & 0x80) >> 7)
        )
        self._a = result & 0xFF
        self._set_nz_flags(self._a)

    def _adc(self) -> None:
        self.__adc(self._read_operand())

    def _sbc(self) -> None:
        self.__adc(self._read_operand() ^ 0xFF)

    def _sta(self) -> None:
        self._store(self._a)

    def _sty(self) -> None:
        self._store(self._y)

    def _stx(self) -> None:
        self._store(self._x)

    def _inx(self) -> None:
        self._x = (self._x + 1) & 0xFF
        self._set_nz_flags(self._x)

    def _dex(self) -> None:
        self._x = (self._x - 1) & 0xFF
        self._set_nz_flags(self._x)

    def _iny(self) -> None:
        self._y = (self._y + 1) & 0xFF
        self._set_nz_flags(self._y)

    def _dey(self) -> None:
        self._y = (self._y - 1) & 0xFF
        self._set_nz_flags(self._y)

    def _inc(self) -> None:
        result = (self._read_operand() + 1) & 0xFF
        self._set_nz_flags(result)
        self._store(result)

    def _dec(self) -> None:
        result = (self._read_operand() - 1) & 0xFF
        self._set_nz_flags(result)
        self._store(result)

    def _txa(self) -> None:
        self._a = self._x
        self._set_nz_flags(self._a)

    def _tya(self) -> None:
        self._a = self._y
        self._set_nz_flags(self._a)

    def _txs(self) -> None:
        self._sp = self._x

    def _tay(self) -> None:
        self._y = self._a
        self._set_nz_flags(self._y)

    def _tax(self) -> None:
        self._x = self._a
        self._set_nz_flags(self._x)

    def _tsx(self) -> None:
        self._x = self._sp
        self._set_nz_flags(self._x)

    def _ldx(self) -> None:
        self._x = self._read_operand()
        self._set_nz_flags(self._x)

    def _ldy(self) -> None:
        self._y = self._read_operand()
        self._set_nz_flags(self._y)

    def _lda(self) -> None:
        self._a = self._read_operand()
        self._set_nz_flags(self._a)

    def __compare(self, register: int, operand: int) -> None:
        self._set_flag(Flag.CARRY, int(register >= operand))
        self._set_nz_flags((register - operand) & 0xFF)

    def _cpx(self) -> None:
        self.__compare(self._x, self._read_operand())

    def _cpy(self) -> None:
        self.__compare(self._y, self._read_operand())

    def _cmp(self) -> None:
        self.__compare(self._a, self._read_operand())

    def _branch(self, condition: bool) -> None:
        if not condition:
            return None
        self._curr_cycles += 1
        offset = self._context.value
        address = (self._pc + self._calc_signed_address_offset(offset)) \
            & 0xFFFF
        if self._is_page_crossed(self._pc, address):
            self._curr_cycles += 1
        self._pc = address

    def _bpl(self) -> None:
        self._branch(not (self._flags & Flag.NEGATIVE))

    def _bmi(self) -> None:
        self._branch(bool(self._flags & Flag.NEGATIVE))

    def _bvc(self) -> None:
        self._branch(not (self._flags & Flag.OVERFLOW))

    def _bvs(self) -> None:
        self._branch(bool(self._flags & Flag.OVERFLOW))

    def _bcc(self) -> None:
        self._branch(not (self._flags & Flag.CARRY))

    def _bcs(self) -> None:
        self._branch(bool(self._flags & Flag.CARRY))

    def _bne(self) -> None:
        self._branch(not (self._flags & Flag.ZERO))

    def _beq(self) -> None:
        self._branch(bool(self._flags & Flag.ZERO))

    def _jsr(self) -> None:
        self._push_word((self._pc - 1) & 0xFFFF)
        self._pc = self._context.address

    def _nop(self) -> None:
        return None

    def _skb(self) -> None:
        return None

    def _skw(self) -> None:
        return None

    def _lax(self) -> None:
        self._a = self._x = self._read_operand()
        self._set_nz_flags(self._a)

    def _aax(self) -> None:
        self._store(self._a & self._x)

    def _dcp(self) -> None:
        result = (self._read_operand() - 1) & 0xFF
        self._store(result)
        self.__compare(self._a, result)

    def _isc(self) -> None:
        result = (self._read_operand() + 1) & 0xFF
        self._store(result)
        self.__adc(result ^ 0xFF)

    def _slo(self) -> None:
        result = self._shift_left(self._read_operand())
        self._store(result)
        self._a |= result
        self._set_nz_flags(self._a)

    def _rla(self) -> None:
        result = self._rotate_left(self._read_operand())
        self._store(result)
        self._a &= result
        self._set_nz_flags(self._a)

    def _sre(self) -> None:
        result = self._shift_right(self._read_operand())
        self._store(result)
        self._a ^= result
        self._set_nz_flags(self._a)

    def _rra(self) -> None:
        result = self._rotate_right(self._read_operand())
        self._store(result)
        self.__adc(result)

    def _init_instructions(self) -> list[Instruction | None]:
        contexts = {
            AddressMode.ACCUMULATOR: self._get_accumulator_context,
            AddressMode.IMPLIED: self._get_implied_context,
            AddressMode.IMMEDIATE: self._get_immediate_context,
            AddressMode.RELATIVE: self._get_relative_context,
            AddressMode.ZEROPAGE: self._get_zeropage_context,
            AddressMode.ZEROPAGE_X: self._get_zeropage_x_context,
            AddressMode.ZEROPAGE_Y: self._get_zeropage_y_context,
            AddressMode.ABSOLUTE: self._get_absolute_context,
            AddressMode.ABSOLUTE_X: self._get_absolute_x_context,
            AddressMode.ABSOLUTE_Y: self._get_absolute_y_context,
            AddressMode.INDIRECT: self._get_indirect_context,
            AddressMode.INDIRECT_X: self._get_indirect_x_context,
            AddressMode.INDIRECT_Y: self._get_indirect_y_context,
        }
        instructions: list[Instruction | None] = [None] * 0x100
        for documented, table in ((True, _OPCODES),
                                  (False, _UNDOCUMENTED_OPCODES)):
            for opcode, mnemonic, mode, cycles, check_page_cross in table:
                instructions[opcode] = Instruction(
                    mnemonic,
                    cycles,
                    mode,
                    contexts[mode],
                    check_page_cross,
                    getattr(self, f'_{mnemonic.lower()}'),
                    documented
                )
        return instructions
