from typing import Tuple

from lc3vm.arch.lc3.cpu import Lc3Cpu
from lc3vm.arch.lc3.state import ConditionFlag
from lc3vm.arch.lc3.traps import TrapDispatcher
from lc3vm.common.types import MEMORY_SIZE
from lc3vm.debugger.controller import ExecutionController, ExecutionState
from lc3vm.host.io import HostIO
from lc3vm.transport.bus import RAM, Bus
from .models import MachineConfig

# @intent:responsibility 設定（Config）に基づいて、Bus、RAM、キーボード、CPUを生成・接続し、初期状態を適用します。
class SystemBuilder:
    def build_system(self, config: MachineConfig, host: HostIO) -> Tuple[Lc3Cpu, Bus]:
        bus = Bus()
        bus.register_device(0x0000, MEMORY_SIZE - 1, RAM(MEMORY_SIZE))
        bus.attach_keyboard(host, config.keyboard_status, config.keyboard_data)

        cpu = Lc3Cpu(bus, TrapDispatcher(host))
        self.apply_initial_state(cpu, config)
        return cpu, bus

    # @intent:responsibility CPUをリセットし、PCと条件フラグの初期値を適用します。
    def apply_initial_state(self, cpu: Lc3Cpu, config: MachineConfig) -> None:
        cpu.reset()
        state = cpu.get_state()
        state.pc = config.origin_pc
        state.cond = ConditionFlag.ZRO

    def build_controller(self, config: MachineConfig) -> ExecutionController:
        if config.start_mode == "turbo":
            return ExecutionController(ExecutionState.TURBO)
        return ExecutionController(ExecutionState.SINGLE_STEP)
