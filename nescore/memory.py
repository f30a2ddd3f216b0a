class Memory:

    def __init__(self, size: int):
        self._size = size
        self._memory = bytearray(size)

    @property
    def size(self) -> int:
        return self._size

    def read(self, address: int) -> int:
        self._check_address(address)
        return self._memory[address]

    def write(self, address: int, data: int) -> None:
        self._check_address(address)
        self._memory[address] = data
        return None

    def write_bytes(self, address: int, data: bytes) -> None:
        if not data:
            return None
        self._check_address(address)
        self._check_address(address + len(data) - 1)
        self._memory[address:address + len(data)] = data
        return None

    def _check_address(self, address: int) -> None:
        if not 0 <= address < self._size:
            raise IndexError(f'address out of range: {address:04X}')
