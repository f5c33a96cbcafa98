# lc3vm/arch/lc3/instructions/maps.py
"""
オペコードと命令実装のマッピング定義。
"""
from . import alu
from . import control
from . import load
from .base import Opcode

# @intent:map オペコードからデコード関数へのマッピングテーブル。
# @intent:invariant 16種全てのOpcodeを網羅します。
DECODE_MAP = {
    # ALU
    Opcode.ADD: alu.decode_add,
    Opcode.AND: alu.decode_and,
    Opcode.NOT: alu.decode_not,

    # Load/Store
    Opcode.LD: load.decode_ld,
    Opcode.LDI: load.decode_ldi,
    Opcode.LDR: load.decode_ldr,
    Opcode.LEA: load.decode_lea,
    Opcode.ST: load.decode_st,
    Opcode.STI: load.decode_sti,
    Opcode.STR: load.decode_str,

    # Control
    Opcode.BR: control.decode_br,
    Opcode.JMP: control.decode_jmp,
    Opcode.JSR: control.decode_jsr,
    Opcode.TRAP: control.decode_trap,
    Opcode.RTI: control.decode_illegal,
    Opcode.RES: control.decode_illegal,
}

# @intent:map オペコードから実行関数へのマッピングテーブル。
EXECUTE_MAP = {
    # ALU
    Opcode.ADD: alu.execute_add,
    Opcode.AND: alu.execute_and,
    Opcode.NOT: alu.execute_not,

    # Load/Store
    Opcode.LD: load.execute_ld,
    Opcode.LDI: load.execute_ldi,
    Opcode.LDR: load.execute_ldr,
    Opcode.LEA: load.execute_lea,
    Opcode.ST: load.execute_st,
    Opcode.STI: load.execute_sti,
    Opcode.STR: load.execute_str,

    # Control
    Opcode.BR: control.execute_br,
    Opcode.JMP: control.execute_jmp,
    Opcode.JSR: control.execute_jsr,
    Opcode.TRAP: control.execute_trap,
    Opcode.RTI: control.execute_illegal,
    Opcode.RES: control.execute_illegal,
}
