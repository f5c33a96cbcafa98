# lc3vm/core/snapshot.py
"""
実行状態の不変スナップショット

このモジュールは、1命令サイクルの結果を記録した不変のデータ構造を定義します。
単一ステップ実行時のトレース表示と、テストでの状態検証に用いる責務を負います。
"""
from dataclasses import dataclass, field
from typing import List, Optional

from lc3vm.common.types import ExecOutcome
from lc3vm.core.state import CpuState
from lc3vm.transport.bus import BusAccess

# @intent:responsibility フェッチされた命令語とそのアドレスを記録します。
@dataclass(frozen=True)
class FetchedWord:
    address: int
    word: int

# @intent:responsibility デコードされた命令の基底レコード。
# @intent:rationale オペコードごとのサブクラスが型付きのオペランドフィールドを持ちます。
@dataclass(frozen=True)
class Operation:
    """
    デコードされた命令の基底クラス。命令語そのもの（word）を保持し、
    サブクラスがニーモニックとオペランドの表示を提供します。
    """
    word: int

    @property
    def opcode_hex(self) -> str:
        return f"{self.word:04X}"

    @property
    def mnemonic(self) -> str:
        return "UNKNOWN"

    @property
    def operands(self) -> List[str]:
        return []

    def __str__(self) -> str:
        if self.operands:
            return f"{self.mnemonic} " + ", ".join(self.operands)
        return self.mnemonic

# @intent:responsibility 実行に関するメタデータを記録します。
@dataclass(frozen=True)
class Metadata:
    """
    実行に関するメタデータ（累計命令数、表示用テキスト、フラグ更新の有無）を記録するデータクラス。
    """
    instruction_count: int
    symbol_info: Optional[str] = None  # 例: "ADD R0, R1, #2"
    flags_updated: bool = False  # この命令が条件フラグを書き込んだか

# @intent:responsibility 1命令実行後のCPUとバスの状態を不変に記録します。
@dataclass(frozen=True)
class Snapshot:
    """
    ある一時点における、CPUの状態とそのサイクルのバスアクティビティを記録した不変のデータ構造。
    stateは実行直後の状態のコピーです。
    """
    address: int
    state: CpuState
    operation: Operation
    metadata: Metadata
    outcome: ExecOutcome = ExecOutcome.CONTINUE
    bus_activity: List[BusAccess] = field(default_factory=list)
