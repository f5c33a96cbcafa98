# lc3vm/loader/loader.py
"""
イメージローダーモジュール。
LC-3のオブジェクトイメージ（ビッグエンディアンの16ビットワード列）をロードします。
"""
import logging
from typing import List

from lc3vm.common.types import MEMORY_SIZE
from lc3vm.transport.bus import Bus

log = logging.getLogger(__name__)

# @intent:responsibility イメージファイルを開けない、または読めない場合のエラー。
class ImageLoadError(Exception):
    def __init__(self, path: str, reason: str):
        super().__init__(f"Failed to load image: {path} ({reason})")
        self.path = path
        self.reason = reason

class ImageLoader:
    """
    先頭ワードをロードアドレス（origin）とし、残りのワードをoriginから順にバスへ書き込むローダー。
    メモリの終端を超える分と、末尾の半端な1バイトは捨てます。
    """
    def load_image(self, file_path: str, bus: Bus) -> int:
        try:
            with open(file_path, 'rb') as f:
                data = f.read()
        except OSError as e:
            raise ImageLoadError(file_path, e.strerror or str(e)) from e
        return self.load_bytes(data, bus, source=file_path)

    # @intent:responsibility バイト列をイメージとして解釈し、バスへ書き込みます。
    # @intent:return ロードアドレス（origin）。
    def load_bytes(self, data: bytes, bus: Bus, source: str = "<bytes>") -> int:
        if len(data) < 2:
            raise ImageLoadError(source, "missing origin word")

        words = self._to_words(data)
        origin = words[0]
        body = words[1:]

        max_read = MEMORY_SIZE - origin
        if len(body) > max_read:
            log.warning("image %s truncated: %d words beyond the end of memory", source, len(body) - max_read)
            body = body[:max_read]

        for i, word in enumerate(body):
            bus.load(origin + i, word)

        log.info("loaded %d words from %s at 0x%04X", len(body), source, origin)
        return origin

    # ビッグエンディアンからワード列へ
    def _to_words(self, data: bytes) -> List[int]:
        return [(data[i] << 8) | data[i + 1] for i in range(0, len(data) - 1, 2)]
