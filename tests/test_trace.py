import pytest

from nescore.cpu import CPU, UnknownOpcodeError
from nescore.memory import Memory
from nescore.trace import (TraceEntry, Tracer, compare_traces,
                           load_reference_log, parse_reference_line)

_NESTEST_LINES = (
    'C000  4C F5 C5  JMP $C5F5                       '
    'A:00 X:00 Y:00 P:24 SP:FD PPU:  0, 21 CYC:7',
    'C5F5  A2 00     LDX #$00                        '
    'A:00 X:00 Y:00 P:24 SP:FD PPU:  0, 30 CYC:10',
    'C6BD  04 A9    *NOP $A9 = 00                    '
    'A:AA X:97 Y:4E P:EF SP:F5 PPU: 77,206 CYC:8749',
)


def _entry(pc, *data, a=0, x=0, y=0, flags=0x24, sp=0xFD):
    return TraceEntry(pc=pc, data=data, a=a, x=x, y=y, flags=flags, sp=sp)


@pytest.fixture
def traced_cpu():
    memory = Memory(0x10000)
    tracer = Tracer()
    cpu = CPU(memory, observer=tracer)
    cpu.reset(pc=0xC000)
    return cpu, memory, tracer


def test_tracer_captures_state_before_execution(traced_cpu):
    cpu, memory, tracer = traced_cpu
    memory.write_bytes(0xC000, bytes([0x4C, 0xF5, 0xC5]))
    memory.write_bytes(0xC5F5, bytes([0xA2, 0x80]))
    cpu.step()
    cpu.step()
    assert tracer.entries == [_entry(0xC000, 0x4C, 0xF5, 0xC5),
                              _entry(0xC5F5, 0xA2, 0x80)]
    assert tracer.entries[1].cycles == 10
    assert tracer.entries[1].mnemonic == 'LDX'
    assert tracer.pending is None


def test_trace_line_layout(traced_cpu):
    cpu, memory, tracer = traced_cpu
    memory.write_bytes(0xC000, bytes([0x4C, 0xF5, 0xC5]))
    cpu.step()
    line = str(tracer.entries[0])
    assert line[:16] == 'C000  4C F5 C5  '
    assert line[16:19] == 'JMP'
    assert line[48:73] == 'A:00 X:00 Y:00 P:24 SP:FD'
    assert line.endswith('CYC:7')
    assert tracer.dump() == line


def test_tracer_keeps_failing_instruction_pending(traced_cpu):
    cpu, memory, tracer = traced_cpu
    memory.write_bytes(0xC000, bytes([0xEA, 0x02]))
    cpu.step()
    with pytest.raises(UnknownOpcodeError):
        cpu.step()
    assert len(tracer.entries) == 1
    assert tracer.pending == _entry(0xC001, 0x02)


def test_tracer_resumes_after_halt(traced_cpu):
    cpu, memory, tracer = traced_cpu
    memory.write_bytes(0xC000, bytes([0xEA, 0x00, 0xEA, 0x00]))
    assert cpu.step() == 2
    assert cpu.step() is None
    assert cpu.step() == 2
    assert [entry.pc for entry in tracer.entries] == [0xC000, 0xC002]
    assert tracer.entries[1].data == (0xEA,)
    assert tracer.entries[1].mnemonic == 'NOP'
    assert tracer.entries[1].cycles == 9


def test_tracer_resumes_after_unknown_opcode(traced_cpu):
    cpu, memory, tracer = traced_cpu
    memory.write_bytes(0xC000, bytes([0x02, 0xA9, 0x01]))
    with pytest.raises(UnknownOpcodeError):
        cpu.step()
    cpu.step()
    assert tracer.entries == [_entry(0xC001, 0xA9, 0x01)]
    assert tracer.pending is None


def test_tracer_clear(traced_cpu):
    cpu, memory, tracer = traced_cpu
    memory.write(0xC000, 0xEA)
    cpu.step()
    tracer.clear()
    assert tracer.entries == []


def test_parse_reference_line():
    entry = parse_reference_line(_NESTEST_LINES[0])
    assert entry == _entry(0xC000, 0x4C, 0xF5, 0xC5)
    assert entry.mnemonic == 'JMP'
    assert entry.cycles == 7


def test_parse_undocumented_opcode_line():
    entry = parse_reference_line(_NESTEST_LINES[2])
    assert entry == _entry(0xC6BD, 0x04, 0xA9, a=0xAA, x=0x97, y=0x4E,
                           flags=0xEF, sp=0xF5)
    assert entry.mnemonic == 'NOP'


def test_parse_own_output():
    entry = TraceEntry(pc=0xC5F5, data=(0xA2, 0x00), a=0x01, x=0x02,
                       y=0x03, flags=0xA5, sp=0xFB, mnemonic='LDX',
                       cycles=12)
    parsed = parse_reference_line(str(entry))
    assert parsed == entry
    assert parsed.cycles == 12


def test_parse_rejects_garbage():
    with pytest.raises(ValueError):
        parse_reference_line('C000  XYZ')


def test_load_reference_log(tmp_path):
    path = tmp_path / 'nestest.log'
    path.write_text('\n'.join(_NESTEST_LINES) + '\n\n')
    assert len(load_reference_log(path)) == 3


def test_compare_identical_traces():
    trace = [parse_reference_line(line) for line in _NESTEST_LINES]
    assert compare_traces(trace, list(trace)) is None


def test_compare_ignores_mnemonic_and_cycles():
    expected = [_entry(0xC000, 0xEA)]
    actual = [TraceEntry(pc=0xC000, data=(0xEA,), a=0, x=0, y=0,
                         flags=0x24, sp=0xFD, mnemonic='SKB', cycles=99)]
    assert compare_traces(actual, expected) is None


def test_compare_reports_divergence():
    expected = [_entry(0xC000, 0xEA), _entry(0xC001, 0xEA)]
    actual = [_entry(0xC000, 0xEA), _entry(0xC001, 0xEA, a=0x01)]
    mismatch = compare_traces(actual, expected)
    assert mismatch.line == 1
    assert mismatch.expected == expected[1]
    assert mismatch.actual == actual[1]


def test_compare_reports_premature_end():
    expected = [_entry(0xC000, 0xEA), _entry(0xC001, 0xEA)]
    mismatch = compare_traces(expected[:1], expected)
    assert mismatch.line == 1
    assert mismatch.actual is None


def test_compare_reports_over_run():
    expected = [_entry(0xC000, 0xEA)]
    actual = [_entry(0xC000, 0xEA), _entry(0xC001, 0xEA)]
    mismatch = compare_traces(actual, expected)
    assert mismatch.line == 1
    assert mismatch.expected is None
    assert 'line 2' in str(mismatch)
