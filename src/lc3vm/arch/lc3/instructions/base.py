# lc3vm/arch/lc3/instructions/base.py
"""
LC-3命令実装用の共通ユーティリティ。
"""
from enum import IntEnum

from lc3vm.common.types import to_word

# @intent:responsibility 命令語の上位4ビットで選択される16種のオペコードを定義します。
class Opcode(IntEnum):
    BR = 0     # branch
    ADD = 1    # add
    LD = 2     # load
    ST = 3     # store
    JSR = 4    # jump register
    AND = 5    # bitwise and
    LDR = 6    # load register
    STR = 7    # store register
    RTI = 8    # unused
    NOT = 9    # bitwise not
    LDI = 10   # load indirect
    STI = 11   # store indirect
    JMP = 12   # jump
    RES = 13   # reserved (unused)
    LEA = 14   # load effective address
    TRAP = 15  # execute trap

# @intent:utility_function 指定ビット幅の2の補数フィールドを16ビットに符号拡張します。
def sign_extend(x: int, bit_count: int) -> int:
    if (x >> (bit_count - 1)) & 1:
        x |= (0xFFFF << bit_count)
    return x & 0xFFFF

# @intent:utility_function 命令語から指定位置のビットフィールドを取り出します。
def bits(word: int, shift: int, width: int) -> int:
    return (word >> shift) & ((1 << width) - 1)

def opcode_of(word: int) -> Opcode:
    return Opcode(word >> 12)

# @intent:utility_function 符号拡張済みの値を表示用の10進数として整形します。
def signed_str(value: int) -> str:
    if value & 0x8000:
        value -= 0x10000
    return f"#{value}"

def reg_name(r: int) -> str:
    return f"R{r}"

def pc_relative(address: int, offset: int) -> int:
    return to_word(address + offset)
