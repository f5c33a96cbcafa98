# lc3vm/transport/bus.py
"""
Transport Layer (メモリバス)

このモジュールは、65536ワードのアドレス空間を抽象化し、
読み書きアクセスをRAMデバイスに委譲する責務を負います。
キーボードのメモリマップドレジスタ（KBSR/KBDR）もここで扱います。
"""
from abc import ABC, abstractmethod
from array import array
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Protocol, Tuple

from lc3vm.common.types import MEMORY_SIZE, WORD_MASK

# @intent:constant キーボードのメモリマップドレジスタの既定アドレス。
KBSR_ADDRESS = 0xFE00  # Keyboard status
KBDR_ADDRESS = 0xFE02  # Keyboard data

# @intent:constant KBSRの「入力あり」ビット。
KBSR_READY = 1 << 15

# @intent:responsibility バスアクセスを記録するためのタイプを定義します。
class BusAccessType(Enum):
    READ = "READ"
    WRITE = "WRITE"

# @intent:responsibility 個々のバスアクセス操作を記録します。
@dataclass(frozen=True)
class BusAccess:
    """
    バス上で行われた単一のアクセス（読み込みまたは書き込み）を記録するデータクラス。
    """
    address: int
    data: int  # 16bit value
    access_type: BusAccessType

# @intent:responsibility キーボード入力の有無と文字を提供するポートを定義します。
class KeyboardPort(Protocol):
    def key_available(self) -> bool: ...

    def read_char(self) -> int: ...

# @intent:responsibility ワード単位でアクセスされるデバイスのインターフェース。
class Device(ABC):
    """
    Busにマップされるデバイス。addressはマップ先の先頭からのワードオフセットです。
    """
    @abstractmethod
    def read(self, address: int) -> int:
        pass

    @abstractmethod
    def write(self, address: int, data: int) -> None:
        pass

# 65536ワードのメインメモリはこの1つで賄う
class RAM(Device):
    def __init__(self, size: int):
        if not isinstance(size, int) or size <= 0:
            raise ValueError("RAM size must be a positive integer.")
        self._memory = array('H', bytes(2 * size))
        self._size = size

    def read(self, address: int) -> int:
        if not 0 <= address < self._size:
            raise IndexError(f"Address {address} out of bounds for RAM of size {self._size}.")
        return self._memory[address]

    def write(self, address: int, data: int) -> None:
        if not 0 <= address < self._size:
            raise IndexError(f"Address {address} out of bounds for RAM of size {self._size}.")
        if not 0 <= data <= WORD_MASK:
            raise ValueError(f"Data {data} is not a 16-bit value.")
        self._memory[address] = data

    def get_size(self) -> int:
        return self._size

# @intent:responsibility 16ビットのアドレス空間をデバイスへ振り分け、CPUからのアクセスを記録します。
# @intent:rationale 1命令分のアクセス記録がSnapshotに入り、単一ステップのトレースで書き込みを表示できます。
class Bus:
    """
    KBSRの読み出しはキーボードポートを非ブロッキングで調べる副作用を持ちます。
    それ以外のアドレスの読み出しと、全ての書き込みは単純なアクセスです。
    """
    def __init__(self):
        self._memory_map: List[Tuple[int, int, Device]] = []
        self._bus_activity_log: List[BusAccess] = []
        self._keyboard: Optional[KeyboardPort] = None
        self._kbsr = KBSR_ADDRESS
        self._kbdr = KBDR_ADDRESS

    def _log_access(self, address: int, data: int, access_type: BusAccessType) -> None:
        self._bus_activity_log.append(BusAccess(address=address, data=data, access_type=access_type))

    # @intent:responsibility 記録を返し、次の命令のために空にします。
    def get_and_clear_activity_log(self) -> List[BusAccess]:
        log = self._bus_activity_log
        self._bus_activity_log = []
        return log

    # @intent:pre-condition 0 <= start_address <= end_address <= 0xFFFF。RAMのサイズは範囲と一致する必要があります。
    def register_device(self, start_address: int, end_address: int, device: Device) -> None:
        # 範囲の重複は検査しない。先に登録したデバイスが優先される
        if not (0 <= start_address <= end_address < MEMORY_SIZE):
            raise ValueError("Invalid address range: start_address must be <= end_address and within 16 bits.")
        if not isinstance(device, Device):
            raise TypeError("Device must be an instance of a class derived from Device.")

        if isinstance(device, RAM):
            expected_size = end_address - start_address + 1
            if device.get_size() != expected_size:
                raise ValueError(
                    f"Registered {type(device).__name__} device size ({device.get_size()} words) does not match "
                    f"the specified address range size ({expected_size} words)."
                )

        self._memory_map.append((start_address, end_address, device))

    # @intent:responsibility キーボードポートをKBSR/KBDRに接続します。
    def attach_keyboard(self, keyboard: KeyboardPort,
                        status_address: int = KBSR_ADDRESS,
                        data_address: int = KBDR_ADDRESS) -> None:
        self._keyboard = keyboard
        self._kbsr = status_address & WORD_MASK
        self._kbdr = data_address & WORD_MASK

    # @intent:post-condition デバイスが見つからなかった場合、IndexErrorを発生させます。
    def _find_device(self, address: int) -> Tuple[Device, int]:
        for start, end, device in self._memory_map:
            if start <= address <= end:
                return device, address - start
        raise IndexError(f"Address {address:#06x} not mapped to any device.")

    # @intent:responsibility KBSR読み出し時にキーボードの状態を取り込みます。
    # @intent:pre-condition key_available()はブロックしてはいけません。
    def _poll_keyboard(self) -> None:
        if self._keyboard is None:
            return
        status_dev, status_off = self._find_device(self._kbsr)
        if self._keyboard.key_available():
            status_dev.write(status_off, KBSR_READY)
            data_dev, data_off = self._find_device(self._kbdr)
            data_dev.write(data_off, self._keyboard.read_char() & WORD_MASK)
        else:
            status_dev.write(status_off, 0)

    # @intent:responsibility CPUからの読み出し。KBSRではキーボードを調べてから読み出します。
    def read(self, address: int) -> int:
        address &= WORD_MASK
        if address == self._kbsr:
            self._poll_keyboard()
        device, offset = self._find_device(address)
        data = device.read(offset)
        self._log_access(address, data, BusAccessType.READ)
        return data

    # @intent:responsibility 副作用とログ記録なしでデータを読み出します。
    def peek(self, address: int) -> int:
        """
        指定されたアドレスから16bitのデータを読み出します（ログ記録・MMIO副作用なし）。
        TRAPの文字列出力やデバッガなどのインスペクタ用。
        """
        device, offset = self._find_device(address & WORD_MASK)
        return device.read(offset)

    # @intent:responsibility CPUからの書き込み。KBSR/KBDRへの書き込みも単純なストアです。
    def write(self, address: int, data: int) -> None:
        address &= WORD_MASK
        device, offset = self._find_device(address)
        device.write(offset, data & WORD_MASK)
        self._log_access(address, data & WORD_MASK, BusAccessType.WRITE)

    # @intent:responsibility ローダー用の書き込み口。ログを残しません。
    def load(self, address: int, data: int) -> None:
        device, offset = self._find_device(address & WORD_MASK)
        device.write(offset, data & WORD_MASK)
