"""TGAヘッダー・フッターモジュール

18バイト固定長ヘッダーと26バイト固定長フッターの
バイト列との相互変換を提供する。

ヘッダーの構造（リトルエンディアン、パディングなし）:
- ID長(1) + カラーマップ種別(1) + 画像タイプ(1)
- カラーマップ仕様(5): 先頭エントリ(2) + エントリ数(2) + エントリのビット数(1)
- X原点(2) + Y原点(2) + 幅(2) + 高さ(2)
- ビット深度(1) + イメージ記述子(1)
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from enum import IntEnum

from tgakit.codec.errors import HeaderError, TruncatedHeader, UnsupportedTypeCode
from tgakit.codec.pixels import PixelFormat

_HEADER_STRUCT = struct.Struct("<BBB5sHHHHBB")


class ImageType(IntEnum):
    """対応する画像タイプコード

    非圧縮とRLE圧縮の2系統があり、RLEは非圧縮のコードに8を加えた値となる。
    """

    TRUE_COLOR = 2
    GRAYSCALE = 3
    RLE_TRUE_COLOR = 10
    RLE_GRAYSCALE = 11

    @property
    def is_rle(self) -> bool:
        return self in (ImageType.RLE_TRUE_COLOR, ImageType.RLE_GRAYSCALE)

    @classmethod
    def for_format(cls, pixel_format: PixelFormat, rle: bool) -> ImageType:
        """ピクセル形式と圧縮有無から画像タイプを決定する"""
        if pixel_format == PixelFormat.GRAYSCALE:
            return cls.RLE_GRAYSCALE if rle else cls.GRAYSCALE
        return cls.RLE_TRUE_COLOR if rle else cls.TRUE_COLOR


@dataclass(frozen=True)
class TGAHeader:
    """TGAヘッダー

    ファイル先頭18バイトの各フィールドを格納されたままの値で保持する不変データクラス。
    解析時には意味的な検証を行わず、検証は validate() で行う。

    Attributes:
        id_length: ヘッダー直後の画像IDフィールドの長さ
        color_map_type: カラーマップ種別（0=なし）
        image_type: 画像タイプコード
        color_map_spec: カラーマップ仕様（5バイト、解釈せずに保持）
        x_origin: X原点（未使用）
        y_origin: Y原点（未使用）
        width: 幅（ピクセル）
        height: 高さ（ピクセル）
        bits_per_pixel: ピクセルあたりのビット数
        image_descriptor: イメージ記述子（bit5=上原点、bit4=右原点）
    """

    SIZE = 18
    TOP_ORIGIN_BIT = 0x20
    RIGHT_ORIGIN_BIT = 0x10

    id_length: int = 0
    color_map_type: int = 0
    image_type: int = 0
    color_map_spec: bytes = b"\x00" * 5
    x_origin: int = 0
    y_origin: int = 0
    width: int = 0
    height: int = 0
    bits_per_pixel: int = 0
    image_descriptor: int = 0

    @classmethod
    def parse(cls, data: bytes) -> TGAHeader:
        """バイト列の先頭18バイトをヘッダーとして解析する

        Args:
            data: ヘッダーを含むバイト列

        Returns:
            解析されたヘッダー

        Raises:
            TruncatedHeader: データが18バイトに満たない場合
        """
        if len(data) < cls.SIZE:
            raise TruncatedHeader(f"ヘッダーが短すぎます: {len(data)}バイト")

        fields = _HEADER_STRUCT.unpack_from(data)
        return cls(*fields)

    def serialize(self) -> bytes:
        """ヘッダーを18バイトのバイト列に変換する"""
        return _HEADER_STRUCT.pack(
            self.id_length,
            self.color_map_type,
            self.image_type,
            self.color_map_spec,
            self.x_origin,
            self.y_origin,
            self.width,
            self.height,
            self.bits_per_pixel,
            self.image_descriptor,
        )

    @classmethod
    def for_image(
        cls,
        width: int,
        height: int,
        pixel_format: PixelFormat,
        *,
        rle: bool,
        vflip: bool,
    ) -> TGAHeader:
        """保存用のヘッダーを作成する

        Args:
            width: 幅
            height: 高さ
            pixel_format: ピクセル形式
            rle: RLE圧縮するか
            vflip: 左下原点として書き出すか（Falseなら左上原点）
        """
        return cls(
            image_type=ImageType.for_format(pixel_format, rle).value,
            width=width,
            height=height,
            bits_per_pixel=pixel_format.value << 3,
            image_descriptor=0x00 if vflip else cls.TOP_ORIGIN_BIT,
        )

    def validate(self) -> PixelFormat:
        """ヘッダーが読み込み可能かを検証する

        カラーマップ種別は検証しない。

        Returns:
            ビット深度から求めたピクセル形式

        Raises:
            HeaderError: 幅・高さ・ビット深度が不正な場合
            UnsupportedTypeCode: 画像タイプが非対応の場合
        """
        if self.width <= 0 or self.height <= 0:
            raise HeaderError(f"画像サイズが不正です: {self.width}x{self.height}")

        if self.bits_per_pixel % 8 != 0:
            raise HeaderError(f"ビット深度が不正です: {self.bits_per_pixel}")
        try:
            pixel_format = PixelFormat(self.bytes_per_pixel)
        except ValueError:
            raise HeaderError(f"ビット深度が不正です: {self.bits_per_pixel}") from None

        try:
            ImageType(self.image_type)
        except ValueError:
            raise UnsupportedTypeCode(self.image_type) from None

        return pixel_format

    @property
    def bytes_per_pixel(self) -> int:
        return self.bits_per_pixel >> 3

    @property
    def is_rle(self) -> bool:
        return self.image_type in (ImageType.RLE_TRUE_COLOR.value, ImageType.RLE_GRAYSCALE.value)

    @property
    def is_top_origin(self) -> bool:
        return bool(self.image_descriptor & self.TOP_ORIGIN_BIT)

    @property
    def is_right_origin(self) -> bool:
        return bool(self.image_descriptor & self.RIGHT_ORIGIN_BIT)

    @property
    def color_map_first_entry(self) -> int:
        return int.from_bytes(self.color_map_spec[0:2], "little")

    @property
    def color_map_length(self) -> int:
        return int.from_bytes(self.color_map_spec[2:4], "little")

    @property
    def color_map_depth(self) -> int:
        return self.color_map_spec[4]


class TGAFooter:
    """TGAフッター

    開発者領域・拡張領域の参照（いずれも0）と署名からなる26バイト固定値。
    保存時に毎回そのまま書き出し、読み込み時は無視する。
    """

    DEVELOPER_AREA_REF: bytes = b"\x00" * 4
    EXTENSION_AREA_REF: bytes = b"\x00" * 4
    SIGNATURE: bytes = b"TRUEVISION-XFILE.\x00"

    SIZE: int = 26

    @classmethod
    def serialize(cls) -> bytes:
        return cls.DEVELOPER_AREA_REF + cls.EXTENSION_AREA_REF + cls.SIGNATURE


def parse_header(data: bytes) -> TGAHeader:
    """TGAHeader.parse の関数版"""
    return TGAHeader.parse(data)


def serialize_header(header: TGAHeader) -> bytes:
    """TGAHeader.serialize の関数版"""
    return header.serialize()
