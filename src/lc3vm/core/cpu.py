# lc3vm/core/cpu.py
"""
Core Layer (命令サイクル)

フェッチ・デコード・実行の順序とスナップショットの生成だけを受け持ちます。
命令ごとの振る舞いはアーキテクチャ側のパッケージが実装します。
"""
from abc import ABC, abstractmethod
from typing import Dict, List, Tuple

from lc3vm.common.types import ExecOutcome, RegisterLayoutInfo
from lc3vm.core.snapshot import FetchedWord, Metadata, Operation, Snapshot
from lc3vm.core.state import CpuState
from lc3vm.transport.bus import Bus

# @intent:responsibility 命令サイクルの骨組み（テンプレートメソッド）を定義します。
class AbstractCpu(ABC):
    """
    サブクラスは状態の生成・コピー、1ワードのフェッチ、デコード、実行を実装します。
    デバッガからはfetch()とexecute()を別々に呼べます。
    """
    def __init__(self, bus: Bus):
        self._bus = bus
        self._state: CpuState = self._create_initial_state()
        self._instruction_count: int = 0

    @abstractmethod
    def _create_initial_state(self) -> CpuState:
        pass

    # @intent:responsibility 状態と命令カウンタを初期値に戻します。
    def reset(self) -> None:
        self._state = self._create_initial_state()
        self._instruction_count = 0

    def get_state(self) -> CpuState:
        return self._state

    def get_bus(self) -> Bus:
        return self._bus

    # @intent:responsibility メモリから次の命令語をフェッチします。
    @abstractmethod
    def _fetch(self) -> int:
        """
        現在のPCからメモリの命令語をフェッチし、その値を返します。
        PCの更新は`_update_pc`が行います。
        """
        pass

    @abstractmethod
    def _decode(self, word: int) -> Operation:
        """
        与えられた命令語を解析し、型付きのOperationオブジェクトとして返します。
        """
        pass

    @abstractmethod
    def _execute(self, operation: Operation) -> ExecOutcome:
        """
        デコードされた命令を実行し、CPUの状態を更新して実行結果の分類を返します。
        """
        pass

    @abstractmethod
    def _copy_state(self) -> CpuState:
        """
        スナップショットに格納する、現在の状態の独立したコピーを返します。
        """
        pass

    def _flags_updated(self) -> bool:
        """
        直前に実行した命令が条件フラグを書き込んだかどうか。フラグを持たないCPUはFalseのままです。
        """
        return False

    # @intent:responsibility フェッチ後、命令実行前にPCを進めます。
    def _update_pc(self) -> None:
        self._state.pc = (self._state.pc + 1) & 0xFFFF

    # @intent:responsibility 命令語をフェッチしてPCを進めます。
    # @intent:rationale デバッガがフェッチと実行の間に割り込めるよう、step()を2段階に分割しています。
    def fetch(self) -> FetchedWord:
        self._bus.get_and_clear_activity_log()
        address = self._state.pc
        word = self._fetch()
        self._update_pc()
        return FetchedWord(address=address, word=word)

    # @intent:responsibility フェッチ済みの命令語をデコード・実行し、その結果のスナップショットを返します。
    def execute(self, fetched: FetchedWord) -> Snapshot:
        operation = self._decode(fetched.word)
        outcome = self._execute(operation)
        self._instruction_count += 1

        return Snapshot(
            address=fetched.address,
            state=self._copy_state(),
            operation=operation,
            metadata=Metadata(instruction_count=self._instruction_count, symbol_info=str(operation),
                              flags_updated=self._flags_updated()),
            outcome=outcome,
            bus_activity=self._bus.get_and_clear_activity_log(),
        )

    # @intent:responsibility 割り込まずに1命令を進めます。
    def step(self) -> Snapshot:
        return self.execute(self.fetch())

    @abstractmethod
    def get_register_map(self) -> Dict[str, int]:
        """
        レジスタ名から値への辞書。デバッガのregコマンドとトレースが使用します。
        """
        pass

    @abstractmethod
    def get_register_layout(self) -> List[RegisterLayoutInfo]:
        """
        レジスタをどのように並べ・グループ化して表示すべきかの定義を返す。
        """
        pass

    @abstractmethod
    def get_flag_state(self) -> Dict[str, bool]:
        pass

    def describe_registers(self) -> List[Tuple[str, int]]:
        """
        レイアウト順に (レジスタ名, 値) のリストを返します。
        """
        values = self.get_register_map()
        return [(reg.name, values[reg.name])
                for group in self.get_register_layout()
                for reg in group.registers]
