"""CLI entry point for tgakit."""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from tgakit import __version__
from tgakit.codec import TGAError, TGAHeader, TGAImage
from tgakit.config import (
    DEFAULT_CONFIG_NAME,
    ConfigError,
    TGAKitConfig,
    get_default_config,
    load_config,
)
from tgakit.converter import ConversionStatus, ImageConverter
from tgakit.logger import ConsoleLogger, ConsoleLoggerHandler, LogConfig, VerboseLevel
from tgakit.types import ExitCode

app = typer.Typer(help="TGA画像の情報表示・変換・反転を行うCLIツール")
console = Console()


def _resolve_config(config_path: Path | None) -> TGAKitConfig:
    """設定ファイルを読み込む（未指定ならカレントのtgakit.ymlを探す）"""
    if config_path is not None:
        return load_config(config_path)
    default_path = Path.cwd() / DEFAULT_CONFIG_NAME
    if default_path.exists():
        return load_config(default_path)
    return get_default_config()


@contextmanager
def _open_logger(
    verbose: int, quiet: bool, log_file: Path | None, config: TGAKitConfig
) -> Iterator[ConsoleLogger]:
    """ConsoleLoggerを作成し、実行中はコーデックのログも転送する"""
    level = VerboseLevel.QUIET if quiet else VerboseLevel.from_count(
        max(verbose, config.logging.verbose)
    )
    log_config = LogConfig(verbose_level=level, log_file=log_file or config.logging.log_file)

    package_logger = logging.getLogger("tgakit")
    previous_level = package_logger.level
    with ConsoleLogger(log_config) as console_logger:
        handler = ConsoleLoggerHandler(console_logger)
        package_logger.addHandler(handler)
        package_logger.setLevel(logging.DEBUG)
        try:
            yield console_logger
        finally:
            package_logger.removeHandler(handler)
            package_logger.setLevel(previous_level)


def _fail(message: str, code: ExitCode = ExitCode.ERROR) -> typer.Exit:
    console.print(f"[red]Error: {message}[/red]")
    return typer.Exit(code)


@app.command()
def info(
    path: Annotated[Path, typer.Argument(help="TGAファイルパス")],
) -> None:
    """TGAヘッダーの内容を表示する"""
    if not path.is_file():
        raise _fail(f"ファイルが見つかりません: {path}", ExitCode.INVALID_INPUT)

    try:
        with path.open("rb") as f:
            header = TGAHeader.parse(f.read(TGAHeader.SIZE))
    except TGAError as e:
        raise _fail(str(e)) from e
    except OSError as e:
        raise _fail(f"ファイルを読み込めません: {e}") from e

    table = Table(title=f"TGA Header: {path.name}")
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Width", str(header.width))
    table.add_row("Height", str(header.height))
    table.add_row("Bits per pixel", str(header.bits_per_pixel))
    table.add_row("Image type", str(header.image_type))
    table.add_row("RLE", "yes" if header.is_rle else "no")
    table.add_row("Origin", _describe_origin(header))
    table.add_section()
    table.add_row("ID length", str(header.id_length))
    table.add_row("Color map type", str(header.color_map_type))
    table.add_row("Descriptor", f"0x{header.image_descriptor:02x}")

    valid = True
    try:
        pixel_format = header.validate()
    except TGAError as e:
        valid = False
        table.add_section()
        table.add_row("Status", f"[red]{e}[/red]")
    else:
        table.add_section()
        table.add_row("Format", pixel_format.name)
        table.add_row("Status", "OK")

    console.print(table)
    raise typer.Exit(ExitCode.SUCCESS if valid else ExitCode.ERROR)


def _describe_origin(header: TGAHeader) -> str:
    vertical = "top" if header.is_top_origin else "bottom"
    horizontal = "right" if header.is_right_origin else "left"
    return f"{vertical}-{horizontal}"


@app.command()
def convert(
    source: Annotated[Path, typer.Argument(help="変換元ファイル（tga/png/bmp/jpg）")],
    dest: Annotated[Path, typer.Argument(help="変換先ファイル（拡張子で形式を決定）")],
    rle: Annotated[
        bool | None, typer.Option("--rle/--no-rle", help="TGA保存時にRLE圧縮する")
    ] = None,
    vflip: Annotated[
        bool | None, typer.Option("--vflip/--no-vflip", help="TGAを左下原点で保存する")
    ] = None,
    config_path: Annotated[Path | None, typer.Option("--config", help="設定ファイル")] = None,
    verbose: Annotated[int, typer.Option("-v", "--verbose", count=True, help="詳細ログ出力")] = 0,
    quiet: Annotated[bool, typer.Option("-q", "--quiet", help="エラー以外を出力しない")] = False,
    log_file: Annotated[Path | None, typer.Option(help="ログファイル出力先")] = None,
) -> None:
    """画像を変換する（TGA⇔PNG/BMP/JPEG、TGAの再圧縮）"""
    if not source.is_file():
        raise _fail(f"ファイルが見つかりません: {source}", ExitCode.INVALID_INPUT)

    try:
        config = _resolve_config(config_path)
    except ConfigError as e:
        raise _fail(str(e)) from e

    converter = ImageConverter(
        rle=config.save.rle if rle is None else rle,
        vflip=config.save.vflip if vflip is None else vflip,
    )

    with _open_logger(verbose, quiet, log_file, config) as logger:
        logger.verbose(f"入力: {source} (rle={converter.rle}, vflip={converter.vflip})")
        result = converter.convert(source, dest)
        logger.log_conversion(source, dest, result.status.value)

        if result.status == ConversionStatus.SKIPPED:
            logger.error(result.message)
            raise typer.Exit(ExitCode.INVALID_INPUT)
        if result.status == ConversionStatus.FAILED:
            logger.error(result.message)
            raise typer.Exit(ExitCode.ERROR)

        logger.log_summary(
            {
                "output_path": result.dest_path,
                "bytes_before": result.bytes_before,
                "bytes_after": result.bytes_after,
            }
        )
    raise typer.Exit(ExitCode.SUCCESS)


@app.command()
def flip(
    path: Annotated[Path, typer.Argument(help="TGAファイルパス")],
    output: Annotated[
        Path | None, typer.Option("-o", "--output", help="出力先（省略時は上書き）")
    ] = None,
    horizontal: Annotated[bool, typer.Option("--horizontal", "-H", help="左右反転")] = False,
    vertical: Annotated[bool, typer.Option("--vertical", "-V", help="上下反転")] = False,
    rle: Annotated[
        bool | None, typer.Option("--rle/--no-rle", help="RLE圧縮して保存する")
    ] = None,
    config_path: Annotated[Path | None, typer.Option("--config", help="設定ファイル")] = None,
    verbose: Annotated[int, typer.Option("-v", "--verbose", count=True, help="詳細ログ出力")] = 0,
) -> None:
    """TGA画像を反転して保存する"""
    if not horizontal and not vertical:
        raise _fail("--horizontal または --vertical を指定してください", ExitCode.INVALID_INPUT)
    if not path.is_file():
        raise _fail(f"ファイルが見つかりません: {path}", ExitCode.INVALID_INPUT)

    try:
        config = _resolve_config(config_path)
    except ConfigError as e:
        raise _fail(str(e)) from e

    dest = output or path
    converter = ImageConverter(
        rle=config.save.rle if rle is None else rle,
        vflip=config.save.vflip,
    )

    with _open_logger(verbose, False, None, config) as logger:
        try:
            image = TGAImage.read_file(path)
            if horizontal:
                image.flip_horizontally()
            if vertical:
                image.flip_vertically()
            converter.save_image(image, dest)
        except (TGAError, OSError) as e:
            logger.error(str(e))
            raise typer.Exit(ExitCode.ERROR) from e

        logger.log_conversion(path, dest, ConversionStatus.SUCCESS.value)
        logger.info(f"反転しました: {dest}")
    raise typer.Exit(ExitCode.SUCCESS)


def version_callback(value: bool) -> None:
    """バージョン表示コールバック"""
    if value:
        typer.echo(f"tgakit {__version__}")
        raise typer.Exit(0)


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=version_callback,
            is_eager=True,
            help="バージョンを表示する",
        ),
    ] = False,
) -> None:
    """tgakit CLI - TGA画像の読み書きツール"""
    pass
