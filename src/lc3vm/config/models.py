from dataclasses import dataclass

from lc3vm.arch.lc3.state import PC_START
from lc3vm.host.console import DEFAULT_HISTORY_LENGTH
from lc3vm.transport.bus import KBDR_ADDRESS, KBSR_ADDRESS

START_MODES = ("step", "turbo")

@dataclass
class MachineConfig:
    origin_pc: int = PC_START
    keyboard_status: int = KBSR_ADDRESS
    keyboard_data: int = KBDR_ADDRESS
    start_mode: str = "step"  # "step", "turbo"
    history_length: int = DEFAULT_HISTORY_LENGTH
    prompt: str = "(lc3vm) "
    trace: bool = True
    log_level: str = "WARNING"
