"""Converter module for tgakit.

TGAと他の画像形式との変換機能を提供するモジュール。
"""

from tgakit.converter.base import BaseConverter, ConversionResult, ConversionStatus
from tgakit.converter.image import ImageConverter, from_pil, to_pil

__all__ = [
    "BaseConverter",
    "ConversionResult",
    "ConversionStatus",
    "ImageConverter",
    "from_pil",
    "to_pil",
]
