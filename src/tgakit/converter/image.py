"""画像変換モジュール

TGA画像と、Pillowで扱える一般的な画像形式（PNG/BMP/JPEG）との相互変換を提供する。
TGAの読み書きはtgakit.codecで行い、それ以外の形式はPillowに任せる。
"""

from __future__ import annotations

from pathlib import Path

from PIL import Image, UnidentifiedImageError

from tgakit.codec import PixelFormat, TGAError, TGAImage
from tgakit.converter.base import BaseConverter, ConversionResult, ConversionStatus

TGA_EXTENSION = ".tga"


def to_pil(image: TGAImage) -> Image.Image:
    """TGAImageをPIL.Imageに変換する

    TGAはBGRA順で格納されているため、チャンネルを並べ替えてRGB/RGBAにする。
    グレースケールはLモードになる。

    Args:
        image: 変換元の画像

    Returns:
        PIL.Imageオブジェクト
    """
    size = (image.width, image.height)
    data = bytes(image.data)

    if image.pixel_format == PixelFormat.GRAYSCALE:
        return Image.frombytes("L", size, data)

    if image.pixel_format == PixelFormat.RGBA:
        b, g, r, a = Image.frombytes("RGBA", size, data).split()
        return Image.merge("RGBA", (r, g, b, a))

    b, g, r = Image.frombytes("RGB", size, data).split()
    return Image.merge("RGB", (r, g, b))


def from_pil(pil_image: Image.Image) -> TGAImage:
    """PIL.ImageをTGAImageに変換する

    L/RGB/RGBA以外のモードは、アルファの有無に応じてRGBまたはRGBAへ変換してから取り込む。

    Args:
        pil_image: 変換元のPIL.Imageオブジェクト

    Returns:
        BGRA順のTGAImage
    """
    mode = pil_image.mode
    if mode not in ("L", "RGB", "RGBA"):
        has_alpha = "A" in mode or (mode == "P" and "transparency" in pil_image.info)
        pil_image = pil_image.convert("RGBA" if has_alpha else "RGB")
        mode = pil_image.mode

    width, height = pil_image.size

    if mode == "L":
        return TGAImage.from_buffer(width, height, PixelFormat.GRAYSCALE, pil_image.tobytes())

    if mode == "RGBA":
        r, g, b, a = pil_image.split()
        bgra = Image.merge("RGBA", (b, g, r, a))
        return TGAImage.from_buffer(width, height, PixelFormat.RGBA, bgra.tobytes())

    r, g, b = pil_image.split()
    bgr = Image.merge("RGB", (b, g, r))
    return TGAImage.from_buffer(width, height, PixelFormat.RGB, bgr.tobytes())


class ImageConverter(BaseConverter):
    """画像変換クラス

    変換元・変換先の拡張子から方向を決める。
    - .tga -> .tga: 圧縮方式や原点を変えて再保存
    - .tga -> .png/.bmp/.jpg: TGAをデコードしてPillowで保存
    - .png/.bmp/.jpg -> .tga: Pillowで読み込みTGAとして保存

    TGAとして保存した画像は、どちらの原点で書き出しても読み込み直すと同じ見た目になる。

    Attributes:
        rle: TGA保存時にRLE圧縮するか
        vflip: TGA保存時に左下原点（下の行から順）で書き出すか
    """

    def __init__(self, rle: bool = True, vflip: bool = True) -> None:
        self._rle = rle
        self._vflip = vflip

    @property
    def rle(self) -> bool:
        return self._rle

    @property
    def vflip(self) -> bool:
        return self._vflip

    @property
    def supported_extensions(self) -> tuple[str, ...]:
        return (TGA_EXTENSION, ".png", ".bmp", ".jpg", ".jpeg")

    def can_convert(self, file_path: Path) -> bool:
        return file_path.suffix.lower() in self.supported_extensions

    def load_image(self, source: Path) -> TGAImage:
        """拡張子に応じてTGAImageとして読み込む

        Raises:
            TGAError: TGAの読み込みに失敗した場合
            OSError: Pillowで読み込めない場合
        """
        if source.suffix.lower() == TGA_EXTENSION:
            return TGAImage.read_file(source)
        with Image.open(source) as pil_image:
            return from_pil(pil_image)

    def save_image(self, image: TGAImage, dest: Path) -> None:
        """拡張子に応じた形式で保存する

        Raises:
            TGAError: TGAの書き出しに失敗した場合
            OSError: Pillowで保存できない場合
        """
        dest.parent.mkdir(parents=True, exist_ok=True)
        ext = dest.suffix.lower()
        if ext == TGA_EXTENSION:
            if self._vflip:
                # 左下原点で書き出す場合は行を並べ替え、見た目を変えずに保存する
                image = TGAImage.from_buffer(
                    image.width, image.height, image.pixel_format, bytearray(image.data)
                )
                image.flip_vertically()
            image.write_file(dest, vflip=self._vflip, rle=self._rle)
            return

        pil_image = to_pil(image)
        try:
            # JPEGはアルファチャンネルを保存できない
            if ext in (".jpg", ".jpeg") and pil_image.mode == "RGBA":
                pil_image = pil_image.convert("RGB")
            pil_image.save(dest)
        finally:
            pil_image.close()

    def convert(self, source: Path, dest: Path) -> ConversionResult:
        """画像ファイルを変換する

        Args:
            source: 変換元ファイルのパス
            dest: 変換先ファイルのパス

        Returns:
            変換結果。非対応の拡張子はSKIPPED、読み書きの失敗はFAILED
        """
        self._validate_source(source)
        bytes_before = self._get_file_size(source)

        if not self.can_convert(source) or not self.can_convert(dest):
            return ConversionResult(
                source_path=source,
                dest_path=None,
                status=ConversionStatus.SKIPPED,
                message=f"非対応の形式です: {source.suffix} -> {dest.suffix}",
                bytes_before=bytes_before,
            )

        try:
            image = self.load_image(source)
            self.save_image(image, dest)
        except (TGAError, UnidentifiedImageError, OSError) as e:
            return ConversionResult(
                source_path=source,
                dest_path=None,
                status=ConversionStatus.FAILED,
                message=str(e),
                bytes_before=bytes_before,
            )

        return ConversionResult(
            source_path=source,
            dest_path=dest,
            status=ConversionStatus.SUCCESS,
            bytes_before=bytes_before,
            bytes_after=self._get_file_size(dest),
        )
