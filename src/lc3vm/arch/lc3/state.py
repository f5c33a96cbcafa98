# lc3vm/arch/lc3/state.py
"""
LC-3 CPU固有の状態定義（レジスタファイル）。
"""
from dataclasses import dataclass, field, replace
from enum import IntFlag
from typing import List

from lc3vm.common.types import to_word
from lc3vm.core.state import CpuState

# @intent:constant 汎用レジスタの本数とPCの初期値。
GENERAL_REGISTER_COUNT = 8
PC_START = 0x3000

# LC-3 コンディションフラグ
# @intent:constant ビット配置はBR命令のn/z/pマスクと一致させています。
class ConditionFlag(IntFlag):
    POS = 1 << 0  # P
    ZRO = 1 << 1  # Z
    NEG = 1 << 2  # N

# @intent:responsibility LC-3 CPUの全てのレジスタ（R0-R7, PC, COND）を保持します。
@dataclass
class Lc3CpuState(CpuState):
    """
    LC-3のレジスタファイル。condは常にPOS/ZRO/NEGのいずれか1つだけを保持します。
    """
    pc: int = PC_START
    registers: List[int] = field(default_factory=lambda: [0] * GENERAL_REGISTER_COUNT)
    cond: ConditionFlag = ConditionFlag.ZRO
    # 現在の命令でupdate_flagsが呼ばれたか。Lc3Cpuが命令ごとにクリアする
    flags_written: bool = field(default=False, compare=False)

    # @intent:responsibility 直前に書き込まれたレジスタの符号/ゼロ状態をcondへ反映します。
    # @intent:post-condition condはZRO(値が0)、NEG(bit15が1)、POS(それ以外)のいずれか。
    def update_flags(self, r: int) -> None:
        value = self.registers[r]
        if value == 0:
            self.cond = ConditionFlag.ZRO
        elif value >> 15:  # 最上位ビットが1
            self.cond = ConditionFlag.NEG
        else:
            self.cond = ConditionFlag.POS
        self.flags_written = True

    # @intent:responsibility 汎用レジスタへ書き込み、フラグを更新します。
    def write_register(self, r: int, value: int) -> None:
        self.registers[r] = to_word(value)
        self.update_flags(r)

    # @intent:responsibility registersリストを共有しない独立したコピーを返します。
    def copy(self) -> 'Lc3CpuState':
        return replace(self, registers=list(self.registers))
