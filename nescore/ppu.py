import enum

from nescore.bus import PPUMemoryBus

PPUCTRL = 0x2000
PPUMASK = 0x2001
PPUSTATUS = 0x2002
OAMADDR = 0x2003
OAMDATA = 0x2004
PPUSCROLL = 0x2005
PPUADDR = 0x2006
PPUDATA = 0x2007
OAMDMA = 0x4014

SCREEN_WIDTH = 256
SCREEN_HEIGHT = 240

_LAST_CYCLE = 340
_LAST_SCANLINE = 261
_VBLANK_SCANLINE = 241
_PRE_RENDER_SCANLINE = 261
_PALETTE_ADDR = 0x3F00


class InvalidPPURegisterError(Exception):

    def __init__(self, address: int):
        super().__init__(f'invalid PPU register: {address:04X}')
        self.address = address


class ReadOnlyRegisterWriteError(Exception):

    def __init__(self, address: int):
        super().__init__(f'write to read-only PPU register: {address:04X}')
        self.address = address


class WriteOnlyRegisterReadError(Exception):

    def __init__(self, address: int):
        super().__init__(f'read from write-only PPU register: {address:04X}')
        self.address = address


class Control(enum.IntFlag):
    NAMETABLE_X = enum.auto()
    NAMETABLE_Y = enum.auto()
    INCREMENT_MODE = enum.auto()
    SPRITE_TABLE = enum.auto()
    BACKGROUND_TABLE = enum.auto()
    SPRITE_HEIGHT = enum.auto()
    MASTER_SLAVE = enum.auto()
    NMI_ENABLE = enum.auto()


class Mask(enum.IntFlag):
    GREYSCALE = enum.auto()
    SHOW_LEFT_BACKGROUND = enum.auto()
    SHOW_LEFT_SPRITES = enum.auto()
    SHOW_BACKGROUND = enum.auto()
    SHOW_SPRITES = enum.auto()
    EMPHASIZE_RED = enum.auto()
    EMPHASIZE_GREEN = enum.auto()
    EMPHASIZE_BLUE = enum.auto()


class Status(enum.IntFlag):
    SPRITE_OVERFLOW = 0x20
    SPRITE_ZERO_HIT = 0x40
    VBLANK = 0x80


class WriteTwiceLatch:
    """16-bit value programmed high byte first by two byte writes."""

    __slots__ = ('value', 'toggle')

    def __init__(self):
        self.value = 0x0000
        self.toggle = False

    def write(self, data: int) -> None:
        if self.toggle:
            self.value = self.value & 0xFF00 | data
        else:
            self.value = data << 8 | self.value & 0x00FF
        self.toggle = not self.toggle
        return None

    def reset_toggle(self) -> None:
        self.toggle = False


class PPU:

    def __init__(self, bus: PPUMemoryBus | None = None, strict: bool = False):
        self._bus = bus if bus is not None else PPUMemoryBus()
        self._strict = strict

        self._oam = bytearray(0x100)
        self._framebuffer = bytearray(SCREEN_WIDTH * SCREEN_HEIGHT * 3)
        self._dma_page: int | None = None
        self.reset()

    @property
    def bus(self) -> PPUMemoryBus:
        return self._bus

    @property
    def control(self) -> Control:
        return self._ctrl

    @property
    def mask(self) -> Mask:
        return self._mask

    @property
    def status(self) -> Status:
        return self._status

    @property
    def oam(self) -> bytes:
        return bytes(self._oam)

    @property
    def scroll(self) -> WriteTwiceLatch:
        return self._scroll

    @property
    def vram_address(self) -> int:
        return self._addr.value & 0x3FFF

    @property
    def framebuffer(self) -> bytearray:
        return self._framebuffer

    def reset(self) -> None:
        self._ctrl = Control(0)
        self._mask = Mask(0)
        self._status = Status(0)
        self._oam_addr = 0x00
        self._oam_dma = 0x00
        self._scroll = WriteTwiceLatch()
        self._addr = WriteTwiceLatch()
        self._data_buffer = 0x00
        self._dma_page = None
        self.scanline = 0
        self.cycle = 0
        self.frame_count = 0
        self.nmi_pending = False
        # OAM contents survive a reset
        self._framebuffer[:] = bytes(len(self._framebuffer))

    def read_register(self, address: int) -> int:
        if address == PPUCTRL:
            # Write-only on hardware, readable here for debugging
            return int(self._ctrl)
        if address == PPUMASK:
            return int(self._mask)
        if address == PPUSTATUS:
            return self._read_status()
        if address == OAMADDR:
            return self._oam_addr
        if address == OAMDATA:
            return self._oam[self._oam_addr]
        if address in (PPUSCROLL, PPUADDR):
            if self._strict:
                raise WriteOnlyRegisterReadError(address)
            return 0x00
        if address == PPUDATA:
            return self._read_data()
        if address == OAMDMA:
            return self._oam_dma
        raise InvalidPPURegisterError(address)

    def write_register(self, address: int, data: int) -> int:
        data &= 0xFF
        if address == PPUCTRL:
            self._ctrl = Control(data)
        elif address == PPUMASK:
            self._mask = Mask(data)
        elif address == PPUSTATUS:
            if self._strict:
                raise ReadOnlyRegisterWriteError(address)
        elif address == OAMADDR:
            self._oam_addr = data
        elif address == OAMDATA:
            self._oam[self._oam_addr] = data
            self._oam_addr = (self._oam_addr + 1) & 0xFF
        elif address == PPUSCROLL:
            self._scroll.write(data)
        elif address == PPUADDR:
            self._addr.write(data)
        elif address == PPUDATA:
            self._bus.write(self.vram_address, data)
            self._increment_vram_address()
        elif address == OAMDMA:
            self._oam_dma = data
            self._dma_page = data
        else:
            raise InvalidPPURegisterError(address)
        return data

    def take_dma_page(self) -> int | None:
        page, self._dma_page = self._dma_page, None
        return page

    def write_oam(self, data: bytes) -> None:
        for byte in data:
            self._oam[self._oam_addr] = byte
            self._oam_addr = (self._oam_addr + 1) & 0xFF
        return None

    def step(self) -> None:
        if self.scanline < SCREEN_HEIGHT and self.cycle < SCREEN_WIDTH:
            self._render_pixel(self.cycle, self.scanline)
        elif self.cycle == 1:
            if self.scanline == _VBLANK_SCANLINE:
                self._status |= Status.VBLANK
                if self._ctrl & Control.NMI_ENABLE:
                    self.nmi_pending = True
            elif self.scanline == _PRE_RENDER_SCANLINE:
                self._status = Status(0)

        self.cycle += 1
        if self.cycle > _LAST_CYCLE:
            self.cycle = 0
            self.scanline += 1
            if self.scanline > _LAST_SCANLINE:
                self.scanline = 0
                self.frame_count += 1
        return None

    def _read_status(self) -> int:
        status = int(self._status)
        self._status &= ~Status.VBLANK
        self._scroll.reset_toggle()
        self._addr.reset_toggle()
        return status

    def _read_data(self) -> int:
        address = self.vram_address
        if address >= _PALETTE_ADDR:
            data = self._bus.read(address)
            # The buffer picks up the nametable byte under the palette
            self._data_buffer = self._bus.read(address - 0x1000)
        else:
            data = self._data_buffer
            self._data_buffer = self._bus.read(address)
        self._increment_vram_address()
        return data

    def _increment_vram_address(self) -> None:
        step = 32 if self._ctrl & Control.INCREMENT_MODE else 1
        self._addr.value = (self._addr.value + step) & 0x3FFF

    def _render_pixel(self, x: int, y: int) -> None:
        # Test pattern until tile rendering exists
        offset = (y * SCREEN_WIDTH + x) * 3
        self._framebuffer[offset] = x
        self._framebuffer[offset + 1] = y
        self._framebuffer[offset + 2] = 128
