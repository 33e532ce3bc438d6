"""コンソールおよびファイルへのログ出力

CLIから利用するログ出力クラスを定義する。
VerboseLevel (詳細ログレベル)に応じて標準出力への表示を制御し、
ログファイルが指定されていればレベルに関係なくすべてのメッセージを記録する。
"""

from __future__ import annotations

import logging
import re
import sys
from dataclasses import dataclass
from datetime import datetime
from enum import IntEnum
from pathlib import Path
from typing import Any, TextIO


class VerboseLevel(IntEnum):
    """詳細ログレベル

    QUIET: エラーのみ出力
    NORMAL: 変換結果とサマリを出力
    VERBOSE: ヘッダー情報なども出力（-vオプション）
    DEBUG: コーデック内部のログも出力（-vvオプション）
    """

    QUIET = -1
    NORMAL = 0
    VERBOSE = 1
    DEBUG = 2

    @classmethod
    def from_count(cls, count: int) -> VerboseLevel:
        """-v の指定回数からレベルを求める"""
        return cls(max(cls.QUIET, min(count, cls.DEBUG)))


@dataclass
class LogConfig:
    """ログ設定

    Attributes:
        verbose_level: ログの詳細度レベル
        log_file: ログ出力先ファイルパス（Noneの場合はファイル出力なし）
        use_emoji: emoji表示を使用するか
    """

    verbose_level: VerboseLevel = VerboseLevel.NORMAL
    log_file: Path | None = None
    use_emoji: bool = True


class ConsoleLogger:
    """コンソールログ出力クラス

    使用例:
        >>> with ConsoleLogger(LogConfig(verbose_level=VerboseLevel.VERBOSE)) as logger:
        ...     logger.info("変換を開始します")
        ...     logger.verbose("input.tga を処理中")
    """

    _ANSI_ESCAPE_PATTERN = re.compile(r"\x1b\[[0-9;]*m")

    def __init__(self, config: LogConfig) -> None:
        self._config = config
        self._log_file: TextIO | None = None
        if config.log_file:
            # クラス自体がコンテキストマネージャとして動作し、__exit__でファイルを閉じる
            self._log_file = open(config.log_file, "w", encoding="utf-8")  # noqa: SIM115

    def __enter__(self) -> ConsoleLogger:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def close(self) -> None:
        if self._log_file:
            self._log_file.close()
            self._log_file = None

    @property
    def config(self) -> LogConfig:
        return self._config

    def _print(self, message: str, file: TextIO | None = None) -> None:
        if file is None:
            file = sys.stdout
        print(message, file=file)

    def _log_to_file(self, level: str, message: str) -> None:
        if self._log_file:
            timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
            clean_message = self._ANSI_ESCAPE_PATTERN.sub("", message)
            self._log_file.write(f"[{timestamp}] {level}: {clean_message}\n")
            self._log_file.flush()

    def info(self, message: str) -> None:
        """情報メッセージを出力する（NORMAL以上）"""
        if self._config.verbose_level >= VerboseLevel.NORMAL:
            self._print(message)
        self._log_to_file("INFO", message)

    def verbose(self, message: str) -> None:
        """詳細メッセージを出力する（VERBOSE以上）"""
        if self._config.verbose_level >= VerboseLevel.VERBOSE:
            self._print(message)
        self._log_to_file("VERBOSE", message)

    def debug(self, message: str) -> None:
        """デバッグメッセージを出力する（DEBUG以上）"""
        if self._config.verbose_level >= VerboseLevel.DEBUG:
            self._print(message)
        self._log_to_file("DEBUG", message)

    def error(self, message: str) -> None:
        """エラーメッセージを出力する（常に標準エラーへ出力）"""
        self._print(f"エラー: {message}", file=sys.stderr)
        self._log_to_file("ERROR", message)

    def warning(self, message: str) -> None:
        """警告メッセージを出力する（QUIET以外）"""
        if self._config.verbose_level > VerboseLevel.QUIET:
            self._print(f"警告: {message}")
        self._log_to_file("WARNING", message)

    def log_conversion(self, source: Path, dest: Path, status: str) -> None:
        """ファイル変換をログする（VERBOSE以上）"""
        self.verbose(f"変換: {source.name} -> {dest.name} [{status}]")

    def log_summary(self, statistics: dict[str, Any]) -> None:
        """変換サマリを出力する（NORMAL以上）

        Args:
            statistics: output_path, bytes_before, bytes_after を含む統計情報
        """
        emoji = "✅" if self._config.use_emoji else "[OK]"
        self.info(f"{emoji} 変換完了")
        if "output_path" in statistics:
            self.info(f"   出力: {statistics['output_path']}")
        before = statistics.get("bytes_before", 0)
        after = statistics.get("bytes_after", 0)
        if before:
            self.info(f"   サイズ: {before} -> {after} バイト ({after / before:.1%})")


class ConsoleLoggerHandler(logging.Handler):
    """標準loggingのレコードをConsoleLoggerへ転送するハンドラ

    コーデックは logging.getLogger(__name__) で診断ログを出すため、
    CLI実行中はこのハンドラを "tgakit" ロガーに取り付けて表示レベルを揃える。
    """

    def __init__(self, console_logger: ConsoleLogger) -> None:
        super().__init__(level=logging.DEBUG)
        self._console_logger = console_logger

    def emit(self, record: logging.LogRecord) -> None:
        message = f"{record.name}: {record.getMessage()}"
        if record.levelno >= logging.ERROR:
            self._console_logger.error(message)
        elif record.levelno >= logging.WARNING:
            self._console_logger.warning(message)
        elif record.levelno >= logging.INFO:
            self._console_logger.verbose(message)
        else:
            self._console_logger.debug(message)
