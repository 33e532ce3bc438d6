"""tgakit - TGA image codec and conversion tool."""

from tgakit.codec import (
    PixelFormat,
    TGAColor,
    TGAError,
    TGAHeader,
    TGAImage,
    load,
    save,
)

__version__ = "0.1.0"

__all__ = [
    "PixelFormat",
    "TGAColor",
    "TGAError",
    "TGAHeader",
    "TGAImage",
    "load",
    "save",
]
