import pytest

from nescore.bus import CPUMemoryBus, PPUMemoryBus
from nescore.ppu import PPU


@pytest.fixture
def ppu():
    return PPU()


@pytest.fixture
def bus(ppu):
    return CPUMemoryBus(ppu)


@pytest.mark.parametrize('mirror', [0x0000, 0x0800, 0x1000, 0x1800])
def test_work_ram_mirroring(bus, mirror):
    bus.write(0x0123, 0x5A)
    assert bus.read(mirror + 0x0123) == 0x5A


def test_ppu_registers_are_mirrored_every_8_bytes(bus, ppu):
    bus.write(0x3FFE, 0x3F)
    bus.write(0x2006, 0x00)
    assert ppu.vram_address == 0x3F00
    bus.write(0x200F, 0x21)
    assert ppu.bus.read(0x3F00) == 0x21


def test_oam_dma_register_routes_to_ppu(bus, ppu):
    bus.write(0x4014, 0x02)
    assert bus.read(0x4014) == 0x02
    assert ppu.take_dma_page() == 0x02


def test_io_registers(bus):
    bus.write(0x4000, 0x11)
    bus.write(0x401F, 0x22)
    assert bus.read(0x4000) == 0x11
    assert bus.read(0x401F) == 0x22


def test_save_ram(bus):
    bus.write(0x6000, 0x33)
    bus.write(0x7FFF, 0x44)
    assert bus.read(0x6000) == 0x33
    assert bus.read(0x7FFF) == 0x44


def test_16kb_cartridge_is_mirrored(bus):
    prg_rom = bytearray(0x4000)
    prg_rom[0x0000] = 0xA9
    prg_rom[0x3FFC] = 0x00
    prg_rom[0x3FFD] = 0xC0
    bus.load_cartridge(bytes(prg_rom))
    assert bus.read(0x8000) == 0xA9
    assert bus.read(0xC000) == 0xA9
    assert bus.read(0xFFFC) == 0x00
    assert bus.read(0xFFFD) == 0xC0


def test_32kb_cartridge_has_two_banks(bus):
    prg_rom = bytes([0x01] * 0x4000 + [0x02] * 0x4000)
    bus.load_cartridge(prg_rom)
    assert bus.read(0x8000) == 0x01
    assert bus.read(0xBFFF) == 0x01
    assert bus.read(0xC000) == 0x02
    assert bus.read(0xFFFF) == 0x02


def test_short_program(bus):
    bus.load_cartridge(b'\xEA\xEA')
    assert bus.read(0xC001) == 0xEA
    assert bus.read(0xC002) == 0x00


def test_oversized_cartridge(bus):
    with pytest.raises(ValueError):
        bus.load_cartridge(bytes(0x8001))


def test_read_page(bus):
    for offset in range(0x100):
        bus.write(0x0200 + offset, offset)
    assert bus.read_page(0x02) == bytes(range(0x100))


def test_ppu_bus_nametable_mirror():
    bus = PPUMemoryBus()
    bus.write(0x2005, 0x12)
    assert bus.read(0x3005) == 0x12
    bus.write(0x3EFF, 0x34)
    assert bus.read(0x2EFF) == 0x34


def test_ppu_bus_palette_mirror():
    bus = PPUMemoryBus()
    bus.write(0x3F01, 0x0F)
    assert bus.read(0x3F21) == 0x0F
    assert bus.read(0x3FE1) == 0x0F


@pytest.mark.parametrize('address, alias', [
    (0x3F10, 0x3F00),
    (0x3F14, 0x3F04),
    (0x3F18, 0x3F08),
    (0x3F1C, 0x3F0C),
])
def test_ppu_bus_backdrop_aliases(address, alias):
    bus = PPUMemoryBus()
    bus.write(address, 0x2A)
    assert bus.read(alias) == 0x2A


def test_ppu_bus_masks_to_14_bits():
    bus = PPUMemoryBus()
    bus.write(0x4010, 0x99)
    assert bus.read(0x0010) == 0x99
