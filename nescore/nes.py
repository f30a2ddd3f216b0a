import logging
import time
import typing

from nescore.bus import CPUMemoryBus, PPUMemoryBus
from nescore.cpu import CPU, CPUObserver, UnknownOpcodeError
from nescore.ppu import PPU

logger = logging.getLogger(__name__)

CPU_CLOCK_HZ = 1_789_773
PPU_STEPS_PER_CPU_CYCLE = 3
_OAM_DMA_CYCLES = 513

DrawCallback = typing.Callable[[memoryview], None]


class Pacer(typing.Protocol):

    def pace(self, cycles: int) -> None:
        ...


class RealTimePacer:

    def __init__(self, clock_hz: int = CPU_CLOCK_HZ):
        self._cycle_duration = 1 / clock_hz
        self._deadline: float | None = None

    def pace(self, cycles: int) -> None:
        now = time.perf_counter()
        if self._deadline is None:
            self._deadline = now
        self._deadline += cycles * self._cycle_duration
        delay = self._deadline - now
        if delay > 0:
            time.sleep(delay)
        elif delay < -1:
            # Too far behind to catch up, start over
            self._deadline = None
        return None


class NES:

    def __init__(self,
                 strict_ppu: bool = False,
                 halt_on_brk: bool = True,
                 observer: CPUObserver | None = None):
        self.ppu_bus = PPUMemoryBus()
        self.ppu = PPU(self.ppu_bus, strict=strict_ppu)
        self.bus = CPUMemoryBus(self.ppu)
        self.cpu = CPU(self.bus, observer=observer, halt_on_brk=halt_on_brk)
        self._pending_cycles = 0

    @property
    def framebuffer(self) -> memoryview:
        return memoryview(self.ppu.framebuffer).toreadonly()

    def load_program(self, prg_rom: bytes, pc: int | None = None) -> None:
        self.bus.load_cartridge(prg_rom)
        logger.info('loaded %d byte PRG ROM', len(prg_rom))
        self.reset(pc)
        return None

    def reset(self, pc: int | None = None) -> None:
        self.ppu.reset()
        self.cpu.reset(pc)
        self._pending_cycles = 0
        logger.info('reset, PC=%04X', self.cpu.pc)
        return None

    def step(self) -> int | None:
        try:
            cycles = self.cpu.step()
        except UnknownOpcodeError as error:
            logger.error('unknown opcode %02X at %04X', error.opcode,
                         error.pc)
            raise
        if cycles is None:
            logger.info('halted at %04X', (self.cpu.pc - 1) & 0xFFFF)
            return None
        cycles += self._pending_cycles
        self._pending_cycles = 0

        dma_page = self.ppu.take_dma_page()
        if dma_page is not None:
            self.ppu.write_oam(self.bus.read_page(dma_page))
            cycles += _OAM_DMA_CYCLES

        for _ in range(cycles * PPU_STEPS_PER_CPU_CYCLE):
            self.ppu.step()

        if self.ppu.nmi_pending:
            self.ppu.nmi_pending = False
            self._pending_cycles = self.cpu.nmi()
        return cycles

    def run(self,
            draw: DrawCallback | None = None,
            pacer: Pacer | None = None,
            should_stop: typing.Callable[[], bool] | None = None,
            max_steps: int | None = None) -> int:
        steps = 0
        while max_steps is None or steps < max_steps:
            if should_stop is not None and should_stop():
                break
            cycles = self.step()
            if cycles is None:
                break
            steps += 1
            if draw is not None:
                draw(self.framebuffer)
            if pacer is not None:
                pacer.pace(cycles)
        return steps

    def snapshot_frame(self) -> bytes:
        return bytes(self.ppu.framebuffer)
