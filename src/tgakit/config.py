"""Configuration module for tgakit."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

DEFAULT_CONFIG_NAME = "tgakit.yml"


class ConfigError(Exception):
    """設定ファイル読み込みエラー"""

    pass


@dataclass(frozen=True)
class SaveConfig:
    """TGA保存設定"""

    rle: bool = True
    vflip: bool = True


@dataclass(frozen=True)
class LoggingConfig:
    """ログ設定"""

    verbose: int = 0
    log_file: Path | None = None


@dataclass(frozen=True)
class TGAKitConfig:
    """ルート設定"""

    save: SaveConfig = field(default_factory=SaveConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def load_config(path: Path) -> TGAKitConfig:
    """設定ファイルを読み込む

    Args:
        path: 設定ファイルパス

    Returns:
        TGAKitConfig: 読み込んだ設定（デフォルトとマージ済み）

    Raises:
        ConfigError: ファイル読み込みまたはパースエラー
    """
    if not path.exists():
        raise ConfigError(f"設定ファイルが見つかりません: {path}")

    try:
        with path.open(encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"YAML解析エラー: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError("設定ファイルはYAMLのマッピング形式である必要があります")

    default = get_default_config()

    return TGAKitConfig(
        save=_merge_save_config(data.get("save", {}), default.save),
        logging=_merge_logging_config(data.get("logging", {}), default.logging),
    )


def get_default_config() -> TGAKitConfig:
    """デフォルト設定を取得する"""
    return TGAKitConfig()


def _merge_save_config(data: dict[str, Any], default: SaveConfig) -> SaveConfig:
    """保存設定をマージする"""
    if not isinstance(data, dict):
        return default
    return SaveConfig(
        rle=_as_bool(data.get("rle", default.rle), "save.rle"),
        vflip=_as_bool(data.get("vflip", default.vflip), "save.vflip"),
    )


def _merge_logging_config(data: dict[str, Any], default: LoggingConfig) -> LoggingConfig:
    """ログ設定をマージする"""
    if not isinstance(data, dict):
        return default
    log_file = data.get("log_file", default.log_file)
    verbose = data.get("verbose", default.verbose)
    if not isinstance(verbose, int) or isinstance(verbose, bool):
        raise ConfigError(f"logging.verbose は整数で指定してください: {verbose!r}")
    return LoggingConfig(
        verbose=verbose,
        log_file=Path(log_file) if log_file is not None else None,
    )


def _as_bool(value: Any, key: str) -> bool:
    if not isinstance(value, bool):
        raise ConfigError(f"{key} は true/false で指定してください: {value!r}")
    return value
