"""Converter基底クラスモジュール

画像ファイルの形式変換を行うConverterの基底クラスと結果データ型を定義する。
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class ConversionStatus(Enum):
    """変換ステータス"""

    SUCCESS = "success"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class ConversionResult:
    """変換結果を表すデータクラス

    Attributes:
        source_path: 変換元ファイルのパス
        dest_path: 変換先ファイルのパス（失敗・スキップ時はNone）
        status: 変換ステータス
        message: 追加メッセージ（エラー詳細等）
        bytes_before: 変換前のファイルサイズ（バイト）
        bytes_after: 変換後のファイルサイズ（バイト）
    """

    source_path: Path
    dest_path: Path | None
    status: ConversionStatus
    message: str = ""
    bytes_before: int = 0
    bytes_after: int = 0

    @property
    def compression_ratio(self) -> float:
        """bytes_after / bytes_before（bytes_beforeが0なら1.0）"""
        if self.bytes_before == 0:
            return 1.0
        return self.bytes_after / self.bytes_before

    @property
    def is_success(self) -> bool:
        return self.status == ConversionStatus.SUCCESS


class BaseConverter(ABC):
    """Converterの基底クラス"""

    @abstractmethod
    def can_convert(self, file_path: Path) -> bool:
        """このConverterで読み込めるファイルかを判定する

        Args:
            file_path: 判定対象のファイルパス

        Returns:
            変換可能な場合True
        """
        ...

    @abstractmethod
    def convert(self, source: Path, dest: Path) -> ConversionResult:
        """ファイルを変換してdestに出力する

        Args:
            source: 変換元ファイルのパス
            dest: 変換先ファイルのパス（拡張子で出力形式を決める）

        Returns:
            変換結果
        """
        ...

    @property
    @abstractmethod
    def supported_extensions(self) -> tuple[str, ...]:
        """対応する拡張子（ドット付き小文字、例: ".tga"）のタプル"""
        ...

    def _validate_source(self, source: Path) -> None:
        """変換元ファイルの検証を行う

        Raises:
            FileNotFoundError: ファイルが存在しない場合
            ValueError: ファイルではなくディレクトリの場合
        """
        if not source.exists():
            raise FileNotFoundError(f"変換元ファイルが見つかりません: {source}")
        if source.is_dir():
            raise ValueError(f"変換元はファイルである必要があります: {source}")

    def _get_file_size(self, path: Path) -> int:
        """ファイルサイズを返す（存在しない場合は0）"""
        if path.exists():
            return path.stat().st_size
        return 0
