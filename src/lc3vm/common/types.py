"""
共通の型定義を提供するモジュール。
プロジェクト全体で使用される汎用的な型エイリアスや定数を定義します。
"""
from enum import Enum
from typing import List, NamedTuple

# @intent:constant 16ビットワードのマスク。全てのワード演算はこのマスクで折り返されます。
WORD_MASK = 0xFFFF

# @intent:constant メモリのワード数 (2^16)。
MEMORY_SIZE = 1 << 16

# @intent:data_structure 単一のレジスタの表示定義。デバッガがレジスタダンプを生成するために使用される。
class RegisterInfo(NamedTuple):
    name: str
    width: int  # ビット幅

# @intent:data_structure レジスタグループの表示定義。関連するレジスタ（例: "General", "Control"）をまとめる。
class RegisterLayoutInfo(NamedTuple):
    group_name: str
    registers: List[RegisterInfo]

# @intent:responsibility 1命令の実行結果を分類します。
# @intent:rationale 実行エンジンの境界を例外で越えないよう、結果は戻り値として呼び出し元へ伝えます。
class ExecOutcome(Enum):
    CONTINUE = "CONTINUE"
    HALT = "HALT"
    ILLEGAL_OPCODE = "ILLEGAL_OPCODE"
    INVALID_TRAP = "INVALID_TRAP"


def to_word(value: int) -> int:
    """任意の整数を16ビットワードに切り詰めます。"""
    return value & WORD_MASK
