import typing

from nescore.memory import Memory

if typing.TYPE_CHECKING:
    from nescore.ppu import PPU

_2KB = 0x0800
_16KB = 0x4000
_32KB = 0x8000

_OAM_DMA_ADDR = 0x4014


class CPUMemoryBus:

    def __init__(self, ppu: 'PPU'):
        self._ppu = ppu
        self._ram = Memory(_2KB)
        self._registers = Memory(0x20)
        self._sram = Memory(0x8000 - 0x4020)
        self._bank1 = Memory(_16KB)
        self._bank2 = self._bank1

    def load_cartridge(self, prg_rom: bytes) -> None:
        if len(prg_rom) > _32KB:
            raise ValueError(f'PRG ROM too large: {len(prg_rom)} bytes')
        self._bank1 = Memory(_16KB)
        if len(prg_rom) > _16KB:
            self._bank2 = Memory(_16KB)
            self._bank1.write_bytes(0, prg_rom[:_16KB])
            self._bank2.write_bytes(0, prg_rom[_16KB:])
        else:
            # 16KB images are mirrored into both slots
            self._bank2 = self._bank1
            self._bank1.write_bytes(0, prg_rom)
        return None

    def read(self, address: int) -> int:
        address &= 0xFFFF
        if address < 0x2000:
            return self._ram.read(address % _2KB)
        if address < 0x4000:
            # PPU registers, mirrored every 8 bytes
            return self._ppu.read_register(0x2000 + (address - 0x2000) % 8)
        if address == _OAM_DMA_ADDR:
            return self._ppu.read_register(address)
        if address < 0x4020:
            # APU and I/O registers
            return self._registers.read(address - 0x4000)
        if address < 0x8000:
            return self._sram.read(address - 0x4020)
        if address < 0xC000:
            return self._bank1.read(address - 0x8000)
        return self._bank2.read(address - 0xC000)

    def write(self, address: int, data: int) -> None:
        address &= 0xFFFF
        if address < 0x2000:
            return self._ram.write(address % _2KB, data)
        if address < 0x4000:
            self._ppu.write_register(0x2000 + (address - 0x2000) % 8, data)
            return None
        if address == _OAM_DMA_ADDR:
            self._ppu.write_register(address, data)
            return None
        if address < 0x4020:
            return self._registers.write(address - 0x4000, data)
        if address < 0x8000:
            return self._sram.write(address - 0x4020, data)
        if address < 0xC000:
            return self._bank1.write(address - 0x8000, data)
        return self._bank2.write(address - 0xC000, data)

    def read_page(self, page: int) -> bytes:
        base = (page & 0xFF) << 8
        return bytes(self.read(base + offset) for offset in range(0x100))


class PPUMemoryBus:

    def __init__(self):
        # Pattern tables and nametables
        self._tables = Memory(0x3000)
        self._palettes = Memory(0x20)

    def read(self, address: int) -> int:
        address &= 0x3FFF
        if address < 0x3000:
            return self._tables.read(address)
        if address < 0x3F00:
            return self._tables.read(address - 0x1000)
        return self._palettes.read(self._palette_index(address))

    def write(self, address: int, data: int) -> None:
        address &= 0x3FFF
        if address < 0x3000:
            return self._tables.write(address, data)
        if address < 0x3F00:
            return self._tables.write(address - 0x1000, data)
        return self._palettes.write(self._palette_index(address), data)

    def _palette_index(self, address: int) -> int:
        index = (address - 0x3F00) % 0x20
        # Sprite backdrop entries alias the background ones
        if index >= 0x10 and index % 4 == 0:
            index -= 0x10
        return index
