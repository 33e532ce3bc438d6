"""TGAコーデックパッケージ

非圧縮およびRLE圧縮のTGA画像（グレースケール・RGB・RGBA）を読み書きする。
"""

from tgakit.codec.errors import (
    HeaderError,
    OverrunError,
    PayloadError,
    SinkUnavailable,
    SourceUnavailable,
    TGAError,
    TruncatedHeader,
    TruncatedPayload,
    TruncatedStream,
    UnsupportedTypeCode,
)
from tgakit.codec.header import ImageType, TGAFooter, TGAHeader, parse_header, serialize_header
from tgakit.codec.image import ZERO_COLOR, TGAColor, TGAImage, load, save
from tgakit.codec.pixels import PixelBuffer, PixelFormat
from tgakit.codec.rle import RLEDecoder, RLEEncoder

__all__ = [
    "HeaderError",
    "ImageType",
    "OverrunError",
    "PayloadError",
    "PixelBuffer",
    "PixelFormat",
    "RLEDecoder",
    "RLEEncoder",
    "SinkUnavailable",
    "SourceUnavailable",
    "TGAColor",
    "TGAError",
    "TGAFooter",
    "TGAHeader",
    "TGAImage",
    "TruncatedHeader",
    "TruncatedPayload",
    "TruncatedStream",
    "UnsupportedTypeCode",
    "ZERO_COLOR",
    "load",
    "parse_header",
    "save",
    "serialize_header",
]
