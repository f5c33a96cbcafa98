# lc3vm/arch/lc3/instructions/__init__.py
"""
LC-3命令セット実装パッケージ。
"""
from lc3vm.common.types import ExecOutcome
from lc3vm.core.snapshot import Operation
from lc3vm.transport.bus import Bus
from lc3vm.arch.lc3.state import Lc3CpuState
from lc3vm.arch.lc3.traps import TrapDispatcher
from .base import Opcode, opcode_of, sign_extend
from .maps import DECODE_MAP, EXECUTE_MAP

# @intent:responsibility 命令語をデコードし、オペコードに対応する型付きレコードを返します。
def decode_opcode(word: int) -> Operation:
    """
    LC-3の命令語をデコードし、Operationのサブクラスを返します。
    """
    return DECODE_MAP[opcode_of(word)](word)

# @intent:responsibility デコードされた命令を実行し、実行結果の分類を返します。
def execute_instruction(operation: Operation, state: Lc3CpuState, bus: Bus,
                        traps: TrapDispatcher) -> ExecOutcome:
    """
    デコードされたLC-3命令を実行し、CPUの状態を変更します。
    """
    executor = EXECUTE_MAP[opcode_of(operation.word)]
    return executor(state, bus, operation, traps)

__all__ = ["Opcode", "decode_opcode", "execute_instruction", "sign_extend"]
