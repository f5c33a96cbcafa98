# lc3vm/arch/lc3/cpu.py
"""
LC-3 CPUエミュレーションの中心モジュール。
"""
from typing import Dict, List

from lc3vm.common.types import ExecOutcome, RegisterInfo, RegisterLayoutInfo
from lc3vm.core.cpu import AbstractCpu
from lc3vm.core.snapshot import Operation
from lc3vm.transport.bus import Bus
from lc3vm.arch.lc3.state import GENERAL_REGISTER_COUNT, ConditionFlag, Lc3CpuState
from lc3vm.arch.lc3.traps import TrapDispatcher
from lc3vm.arch.lc3.instructions import decode_opcode, execute_instruction

# @intent:responsibility LC-3 CPUの具体的なエミュレーションロジック（フェッチ、デコード、実行）を提供します。
class Lc3Cpu(AbstractCpu):
    """
    LC-3 CPUをエミュレートするクラス。TRAP命令はTrapDispatcherへ委譲します。
    """
    def __init__(self, bus: Bus, traps: TrapDispatcher):
        self._traps = traps
        super().__init__(bus)

    def _create_initial_state(self) -> Lc3CpuState:
        # 条件フラグは常に1つだけ立っている必要があるので、ZROで始める
        return Lc3CpuState()

    def get_state(self) -> Lc3CpuState:
        return self._state

    def _copy_state(self) -> Lc3CpuState:
        return self._state.copy()

    def _fetch(self) -> int:
        return self._bus.read(self._state.pc)

    def _decode(self, word: int) -> Operation:
        return decode_opcode(word)

    def _execute(self, operation: Operation) -> ExecOutcome:
        self._state.flags_written = False
        return execute_instruction(operation, self._state, self._bus, self._traps)

    def _flags_updated(self) -> bool:
        return self._state.flags_written

    # @intent:responsibility 表示用に、現在のレジスタ値を辞書形式で提供します。
    def get_register_map(self) -> Dict[str, int]:
        s = self._state
        regs = {f"R{i}": s.registers[i] for i in range(GENERAL_REGISTER_COUNT)}
        regs["PC"] = s.pc
        regs["COND"] = int(s.cond)
        return regs

    def get_register_layout(self) -> List[RegisterLayoutInfo]:
        return [
            RegisterLayoutInfo("General", [RegisterInfo(f"R{i}", 16) for i in range(GENERAL_REGISTER_COUNT)]),
            RegisterLayoutInfo("Control", [RegisterInfo("PC", 16), RegisterInfo("COND", 3)]),
        ]

    def get_flag_state(self) -> Dict[str, bool]:
        cond = self._state.cond
        return {
            "N": cond == ConditionFlag.NEG,
            "Z": cond == ConditionFlag.ZRO,
            "P": cond == ConditionFlag.POS,
        }
