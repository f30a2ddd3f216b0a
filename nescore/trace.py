import dataclasses
import pathlib
import typing

if typing.TYPE_CHECKING:
    from nescore.cpu import CPU

_MAX_INSTRUCTION_BYTES = 3


@dataclasses.dataclass(frozen=True, slots=True)
class TraceEntry:
    pc: int
    data: tuple[int, ...]
    a: int
    x: int
    y: int
    flags: int
    sp: int
    mnemonic: str = dataclasses.field(default='', compare=False)
    cycles: int = dataclasses.field(default=0, compare=False)

    @property
    def opcode(self) -> int:
        return self.data[0]

    def __repr__(self):
        data = ' '.join(f'{byte:02X}' for byte in self.data)
        return f'{self.__class__.__name__}(' \
               f'pc={self.pc:04X}, ' \
               f'data=[{data}], ' \
               f'mnemonic={self.mnemonic}, ' \
               f'a={self.a:02X}, ' \
               f'x={self.x:02X}, ' \
               f'y={self.y:02X}, ' \
               f'flags={self.flags:02X}, ' \
               f'sp={self.sp:02X}, ' \
               f'cycles={self.cycles}' \
               f')'

    def __str__(self):
        data = ' '.join(f'{byte:02X}' for byte in self.data)
        return f'{self.pc:04X}  {data:<10}{self.mnemonic:<32}' \
               f'A:{self.a:02X} X:{self.x:02X} Y:{self.y:02X} ' \
               f'P:{self.flags:02X} SP:{self.sp:02X} CYC:{self.cycles}'


@dataclasses.dataclass(frozen=True, slots=True)
class TraceMismatch:
    line: int
    expected: TraceEntry | None
    actual: TraceEntry | None

    def __str__(self):
        return f'line {self.line + 1}:\n' \
               f'  expected: {self.expected}\n' \
               f'  actual:   {self.actual}'


class Tracer:

    def __init__(self):
        self.entries: list[TraceEntry] = []
        self._state: dict | None = None
        self._data: list[int] = []

    @property
    def pending(self) -> TraceEntry | None:
        if self._state is None:
            return None
        return TraceEntry(data=tuple(self._data), **self._state)

    def on_begin(self, cpu: 'CPU') -> None:
        self._state = {
            'pc': cpu.pc,
            'a': cpu.a,
            'x': cpu.x,
            'y': cpu.y,
            'flags': cpu.status,
            'sp': cpu.sp,
            'mnemonic': '',
            'cycles': cpu.total_cycles,
        }
        self._data = []
        return None

    def on_fetch(self, cpu: 'CPU', value: int) -> None:
        if self._state is None:
            return None
        if not self._data:
            opcode_info = cpu.decode(value)
            self._state['mnemonic'] = opcode_info.mnemonic \
                if opcode_info else ''
        self._data.append(value)
        return None

    def on_step(self, cpu: 'CPU', cycles: int) -> None:
        entry = self.pending
        if entry is not None:
            self.entries.append(entry)
        self._state = None
        self._data = []
        return None

    def clear(self) -> None:
        self.entries.clear()
        self._state = None
        self._data = []

    def dump(self) -> str:
        return '\n'.join(str(entry) for entry in self.entries)


def _is_hex_byte(value: str) -> bool:
    if len(value) != 2:
        return False
    try:
        int(value, 16)
    except ValueError:
        return False
    return True


def parse_reference_line(line: str) -> TraceEntry:
    splited = line.split()
    pc = int(splited[0], 16)
    index = 1
    data = []
    while (len(data) < _MAX_INSTRUCTION_BYTES
           and index < len(splited) and _is_hex_byte(splited[index])):
        data.append(int(splited[index], 16))
        index += 1
    if not data:
        raise ValueError(f'no instruction bytes in trace line: {line!r}')
    mnemonic = splited[index].lstrip('*') if index < len(splited) else ''
    while index < len(splited) and not splited[index].startswith('A:'):
        index += 1
    if index + 4 >= len(splited):
        raise ValueError(f'no register snapshot in trace line: {line!r}')
    a, x, y, flags, sp = (int(field.split(':')[1], 16)
                          for field in splited[index:index + 5])
    cycles = 0
    if splited[-1].startswith('CYC:'):
        cycles = int(splited[-1].split(':')[1])
    return TraceEntry(pc=pc,
                      data=tuple(data),
                      a=a,
                      x=x,
                      y=y,
                      flags=flags,
                      sp=sp,
                      mnemonic=mnemonic,
                      cycles=cycles)


def load_reference_log(path: str | pathlib.Path) -> list[TraceEntry]:
    trace = []
    with open(path, 'r') as file:
        for line in file:
            if line.strip():
                trace.append(parse_reference_line(line))
    return trace


def compare_traces(actual: typing.Sequence[TraceEntry],
                   expected: typing.Sequence[TraceEntry]
                   ) -> TraceMismatch | None:
    for line, (actual_entry, expected_entry) in enumerate(zip(actual,
                                                              expected)):
        if actual_entry != expected_entry:
            return TraceMismatch(line, expected_entry, actual_entry)
    if len(actual) < len(expected):
        return TraceMismatch(len(actual), expected[len(actual)], None)
    if len(actual) > len(expected):
        return TraceMismatch(len(expected), None, actual[len(expected)])
    return None
