"""ピクセルバッファモジュール

画像の生バイト列とピクセルあたりのチャンネル数（ストライド）を保持し、
範囲チェック付きのアクセスと反転操作を提供する。
"""

from enum import IntEnum


class PixelFormat(IntEnum):
    """ピクセルあたりのバイト数

    GRAYSCALE: 1チャンネル（輝度）
    RGB: 3チャンネル（B, G, R）
    RGBA: 4チャンネル（B, G, R, A）
    """

    GRAYSCALE = 1
    RGB = 3
    RGBA = 4


class PixelBuffer:
    """行優先の連続バイトバッファ

    各ピクセルのチャンネルは B, G, R, (A) の順で格納される。
    バッファ長は常に width * height * channels と一致する。
    """

    def __init__(self, width: int, height: int, channels: int) -> None:
        """ゼロ埋めされたバッファを確保する

        Args:
            width: 幅（ピクセル）
            height: 高さ（ピクセル）
            channels: ピクセルあたりのバイト数

        Raises:
            ValueError: 幅・高さが負、またはチャンネル数が不正な場合
        """
        if width < 0 or height < 0:
            raise ValueError(f"画像サイズが不正です: {width}x{height}")
        self._channels = PixelFormat(channels).value
        self._width = width
        self._height = height
        self._data = bytearray(width * height * self._channels)

    @classmethod
    def from_data(cls, width: int, height: int, channels: int, data: bytearray) -> "PixelBuffer":
        """既存のバイト列をバッファとして引き取る

        bytearrayはコピーせずにそのまま保持する。

        Raises:
            ValueError: データ長が width * height * channels と一致しない場合
        """
        expected = width * height * channels
        if len(data) != expected:
            raise ValueError(f"データ長が画像サイズと一致しません: {len(data)} != {expected}")
        buffer = cls(0, 0, channels)
        buffer._width = width
        buffer._height = height
        buffer._data = data if isinstance(data, bytearray) else bytearray(data)
        return buffer

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def channels(self) -> int:
        return self._channels

    @property
    def data(self) -> bytearray:
        """バッファ本体（書き換えるとピクセルも変わる）"""
        return self._data

    def __len__(self) -> int:
        return len(self._data)

    def is_empty(self) -> bool:
        return not self._data

    def resize(self, width: int, height: int) -> None:
        """バッファを再確保してゼロ埋めする

        Args:
            width: 新しい幅
            height: 新しい高さ

        Raises:
            ValueError: 幅・高さが負の場合
        """
        if width < 0 or height < 0:
            raise ValueError(f"画像サイズが不正です: {width}x{height}")
        self._width = width
        self._height = height
        self._data = bytearray(width * height * self._channels)

    def offset(self, x: int, y: int) -> int | None:
        """ピクセル(x, y)の先頭バイト位置を返す

        Returns:
            バイトオフセット。範囲外または空バッファの場合はNone
        """
        if not self._data or x < 0 or y < 0 or x >= self._width or y >= self._height:
            return None
        return (x + y * self._width) * self._channels

    def read_pixel(self, x: int, y: int) -> bytes | None:
        """ピクセル(x, y)のバイト列を返す（範囲外はNone）"""
        pos = self.offset(x, y)
        if pos is None:
            return None
        return bytes(self._data[pos : pos + self._channels])

    def write_pixel(self, x: int, y: int, value: bytes) -> bool:
        """ピクセル(x, y)を上書きする

        valueの先頭channelsバイトのみを書き込む。

        Returns:
            書き込んだ場合True、範囲外で何もしなかった場合False
        """
        pos = self.offset(x, y)
        if pos is None:
            return False
        if len(value) < self._channels:
            raise ValueError(f"ピクセル値が短すぎます: {len(value)} < {self._channels}")
        self._data[pos : pos + self._channels] = value[: self._channels]
        return True

    def flip_horizontally(self) -> None:
        """左右反転する（ピクセル単位で入れ替え）"""
        c = self._channels
        row_size = self._width * c
        for y in range(self._height):
            start = y * row_size
            row = self._data[start : start + row_size]
            self._data[start : start + row_size] = b"".join(
                row[x * c : (x + 1) * c] for x in range(self._width - 1, -1, -1)
            )

    def flip_vertically(self) -> None:
        """上下反転する（行単位で入れ替え）"""
        row_size = self._width * self._channels
        for y in range(self._height // 2):
            top = y * row_size
            bottom = (self._height - 1 - y) * row_size
            top_row = self._data[top : top + row_size]
            self._data[top : top + row_size] = self._data[bottom : bottom + row_size]
            self._data[bottom : bottom + row_size] = top_row
