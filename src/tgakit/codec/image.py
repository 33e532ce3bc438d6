"""TGA画像モジュール

ヘッダー・ピクセルバッファ・RLEエンジンを組み合わせ、
TGA画像の読み込み・保存とピクセル単位の読み書きを提供する。

読み込み: ヘッダー解析 -> 検証 -> バッファ確保 -> 生データ読み込みまたはRLE解凍 -> 向きの正規化
保存: ヘッダー -> 生データまたはRLE圧縮データ -> 固定フッター
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO

from tgakit.codec.errors import (
    HeaderError,
    SinkUnavailable,
    SourceUnavailable,
    TGAError,
    TruncatedPayload,
)
from tgakit.codec.header import TGAFooter, TGAHeader
from tgakit.codec.pixels import PixelBuffer, PixelFormat
from tgakit.codec.rle import RLEDecoder, RLEEncoder
from tgakit.codec.stream import as_reader, read_exact, readinto_exact, write_all

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TGAColor:
    """ピクセルの色

    TGAの格納順に合わせて B, G, R, A の4バイト枠で保持する。
    channelsは4バイトのうち意味を持つバイト数を表す。

    Attributes:
        bgra: (B, G, R, A) の4要素タプル
        channels: 有効なバイト数（0は画像外を表すゼロ色）
    """

    bgra: tuple[int, int, int, int] = (0, 0, 0, 0)
    channels: int = 4

    def __post_init__(self) -> None:
        if len(self.bgra) != 4:
            raise ValueError(f"色は4要素で指定してください: {self.bgra}")
        if any(not 0 <= v <= 255 for v in self.bgra):
            raise ValueError(f"色の値は0-255の範囲で指定してください: {self.bgra}")
        if not 0 <= self.channels <= 4:
            raise ValueError(f"チャンネル数は0-4の範囲で指定してください: {self.channels}")

    @classmethod
    def from_rgb(cls, r: int, g: int, b: int) -> TGAColor:
        return cls((b, g, r, 255), PixelFormat.RGB.value)

    @classmethod
    def from_rgba(cls, r: int, g: int, b: int, a: int) -> TGAColor:
        return cls((b, g, r, a), PixelFormat.RGBA.value)

    @classmethod
    def gray(cls, value: int) -> TGAColor:
        return cls((value, 0, 0, 0), PixelFormat.GRAYSCALE.value)

    def __getitem__(self, index: int) -> int:
        return self.bgra[index]

    @property
    def rgba(self) -> tuple[int, int, int, int]:
        b, g, r, a = self.bgra
        return (r, g, b, a)

    def to_bytes(self) -> bytes:
        return bytes(self.bgra)


ZERO_COLOR = TGAColor(channels=0)
"""画像外や空画像の読み出しで返すゼロ色"""


class TGAImage:
    """TGA画像

    メモリ上のピクセルは常に左上原点・左から右の行優先で保持する。

    使用例:
        >>> image = TGAImage(64, 64, PixelFormat.RGB)
        >>> image.set(0, 0, TGAColor.from_rgb(255, 0, 0))
        >>> image.write_file(Path("red.tga"), rle=True)
    """

    def __init__(
        self,
        width: int = 0,
        height: int = 0,
        pixel_format: PixelFormat | int = PixelFormat.RGB,
    ) -> None:
        """ゼロ埋めされた画像を作成する

        Args:
            width: 幅（ピクセル）
            height: 高さ（ピクセル）
            pixel_format: ピクセル形式
        """
        self._pixels = PixelBuffer(width, height, PixelFormat(pixel_format))

    @classmethod
    def from_buffer(
        cls,
        width: int,
        height: int,
        pixel_format: PixelFormat | int,
        data: bytes | bytearray,
    ) -> TGAImage:
        """BGRA順のピクセルデータから画像を作成する

        Raises:
            ValueError: データ長が width * height * channels と一致しない場合
        """
        image = cls.__new__(cls)
        image._pixels = PixelBuffer.from_data(width, height, PixelFormat(pixel_format), data)
        return image

    def __repr__(self) -> str:
        return f"TGAImage({self.width}x{self.height}, {self.pixel_format.name})"

    @property
    def width(self) -> int:
        return self._pixels.width

    @property
    def height(self) -> int:
        return self._pixels.height

    @property
    def pixel_format(self) -> PixelFormat:
        return PixelFormat(self._pixels.channels)

    @property
    def channels(self) -> int:
        return self._pixels.channels

    @property
    def data(self) -> bytearray:
        """ピクセルデータ（BGRA順、行優先、左上原点）"""
        return self._pixels.data

    def resize(self, width: int, height: int) -> None:
        """画像サイズを変更する（ピクセルはゼロ埋めされる）"""
        self._pixels.resize(width, height)

    def get(self, x: int, y: int) -> TGAColor:
        """ピクセル(x, y)の色を返す

        Returns:
            ピクセルの色。範囲外または空画像の場合はゼロ色
        """
        value = self._pixels.read_pixel(x, y)
        if value is None:
            return ZERO_COLOR
        padded = value + b"\x00" * (4 - len(value))
        return TGAColor((padded[0], padded[1], padded[2], padded[3]), len(value))

    def set(self, x: int, y: int, color: TGAColor) -> None:
        """ピクセル(x, y)に色を書き込む

        色の先頭channelsバイトのみを書き込む。範囲外または空画像の場合は何もしない。
        """
        self._pixels.write_pixel(x, y, color.to_bytes())

    def flip_horizontally(self) -> None:
        self._pixels.flip_horizontally()

    def flip_vertically(self) -> None:
        self._pixels.flip_vertically()

    @classmethod
    def read(cls, stream: BinaryIO | bytes) -> TGAImage:
        """ストリームからTGA画像を読み込む

        ヘッダーを検証し終えてから画像を構築するため、
        失敗時に中途半端な画像が呼び出し側に渡ることはない。

        Args:
            stream: 読み込み元のバイナリストリーム（またはバイト列）

        Returns:
            読み込んだ画像

        Raises:
            SourceUnavailable: 読み込み中にI/Oエラーが発生した場合
            HeaderError: ヘッダーが不正な場合
            UnsupportedTypeCode: 画像タイプが非対応の場合
            PayloadError: ピクセルデータが不足・超過している場合
        """
        reader = as_reader(stream)
        try:
            return cls._read(reader)
        except TGAError:
            raise
        except OSError as e:
            raise SourceUnavailable(f"画像の読み込みに失敗しました: {e}") from e

    @classmethod
    def _read(cls, reader: BinaryIO) -> TGAImage:
        header = TGAHeader.parse(read_exact(reader, TGAHeader.SIZE))
        pixel_format = header.validate()

        # 画像IDフィールドは解釈せずに読み飛ばす
        if header.id_length:
            image_id = read_exact(reader, header.id_length)
            if len(image_id) != header.id_length:
                raise TruncatedPayload("画像IDフィールドが不完全です")

        channels = pixel_format.value
        try:
            buffer = bytearray(header.width * header.height * channels)
        except MemoryError as e:
            raise HeaderError(f"画像サイズが大きすぎます: {header.width}x{header.height}") from e
        if header.is_rle:
            RLEDecoder().decode_into(reader, buffer, channels)
        else:
            filled = readinto_exact(reader, buffer)
            if filled != len(buffer):
                raise TruncatedPayload(
                    f"ピクセルデータが不足しています: {filled}/{len(buffer)}バイト"
                )

        pixels = PixelBuffer.from_data(header.width, header.height, channels, buffer)
        if not header.is_top_origin:
            pixels.flip_vertically()
        if header.is_right_origin:
            pixels.flip_horizontally()

        logger.debug(f"{header.width}x{header.height}/{header.bits_per_pixel}")

        image = cls.__new__(cls)
        image._pixels = pixels
        return image

    @classmethod
    def read_file(cls, path: Path | str) -> TGAImage:
        """TGAファイルを読み込む

        Raises:
            SourceUnavailable: ファイルを開けない場合
        """
        try:
            f = open(path, "rb")  # noqa: SIM115
        except OSError as e:
            raise SourceUnavailable(f"ファイルを開けません: {path}") from e
        with f:
            return cls.read(f)

    @classmethod
    def from_bytes(cls, data: bytes) -> TGAImage:
        return cls.read(data)

    def write(self, stream: BinaryIO, vflip: bool = True, rle: bool = True) -> None:
        """TGA画像をストリームに書き出す

        ピクセルの並びはそのまま書き出し、原点はイメージ記述子で示す。

        Args:
            stream: 書き込み先のバイナリストリーム
            vflip: 左下原点として書き出すか（Falseなら左上原点）
            rle: RLE圧縮するか

        Raises:
            HeaderError: 空画像、または幅・高さが65535を超える場合
            SinkUnavailable: 書き込み中にI/Oエラーが発生した場合
        """
        header = self._build_header(vflip=vflip, rle=rle)
        if rle:
            payload: bytes | bytearray = RLEEncoder().encode(
                self._pixels.data, self.width, self.height, self.channels
            )
        else:
            payload = self._pixels.data

        try:
            write_all(stream, header.serialize())
            write_all(stream, payload)
            write_all(stream, TGAFooter.serialize())
        except SinkUnavailable:
            raise
        except OSError as e:
            raise SinkUnavailable(f"画像の書き込みに失敗しました: {e}") from e

        logger.debug(
            f"{self.width}x{self.height}/{header.bits_per_pixel} "
            f"rle={rle} vflip={vflip} payload={len(payload)}"
        )

    def write_file(self, path: Path | str, vflip: bool = True, rle: bool = True) -> None:
        """TGAファイルとして保存する

        Raises:
            SinkUnavailable: ファイルを開けない、または書き込めない場合
        """
        # 空画像はファイルを作成する前に検出する
        self._build_header(vflip=vflip, rle=rle)
        try:
            f = open(path, "wb")  # noqa: SIM115
        except OSError as e:
            raise SinkUnavailable(f"ファイルを開けません: {path}") from e
        with f:
            self.write(f, vflip=vflip, rle=rle)

    def to_bytes(self, vflip: bool = True, rle: bool = True) -> bytes:
        buffer = io.BytesIO()
        self.write(buffer, vflip=vflip, rle=rle)
        return buffer.getvalue()

    def _build_header(self, *, vflip: bool, rle: bool) -> TGAHeader:
        if self._pixels.is_empty():
            raise HeaderError(f"空の画像は保存できません: {self.width}x{self.height}")
        if self.width > 0xFFFF or self.height > 0xFFFF:
            raise HeaderError(f"画像サイズが大きすぎます: {self.width}x{self.height}")
        return TGAHeader.for_image(
            self.width, self.height, self.pixel_format, rle=rle, vflip=vflip
        )


def load(source: BinaryIO | bytes | Path | str) -> TGAImage:
    """TGA画像を読み込む

    Args:
        source: ファイルパス、バイナリストリーム、またはバイト列
    """
    if isinstance(source, (str, Path)):
        return TGAImage.read_file(source)
    return TGAImage.read(source)


def save(
    image: TGAImage,
    sink: BinaryIO | Path | str,
    vflip: bool = True,
    rle: bool = True,
) -> None:
    """TGA画像を保存する

    Args:
        image: 保存する画像
        sink: ファイルパスまたはバイナリストリーム
        vflip: 左下原点として書き出すか
        rle: RLE圧縮するか
    """
    if isinstance(sink, (str, Path)):
        image.write_file(sink, vflip=vflip, rle=rle)
    else:
        image.write(sink, vflip=vflip, rle=rle)
