"""Converter基底クラスのテスト"""

from pathlib import Path

import pytest

from tgakit.converter import BaseConverter, ConversionResult, ConversionStatus


class MockConverter(BaseConverter):
    """テスト用の具象Converterクラス"""

    @property
    def supported_extensions(self) -> tuple[str, ...]:
        return (".tga",)

    def can_convert(self, file_path: Path) -> bool:
        return file_path.suffix.lower() in self.supported_extensions

    def convert(self, source: Path, dest: Path) -> ConversionResult:
        self._validate_source(source)
        return ConversionResult(
            source_path=source,
            dest_path=dest,
            status=ConversionStatus.SUCCESS,
            bytes_before=self._get_file_size(source),
        )


class TestConversionStatus:
    """ConversionStatus列挙型のテスト"""

    @pytest.mark.parametrize(
        "status,expected_value",
        [
            pytest.param(ConversionStatus.SUCCESS, "success", id="正常系: SUCCESSステータス"),
            pytest.param(ConversionStatus.SKIPPED, "skipped", id="正常系: SKIPPEDステータス"),
            pytest.param(ConversionStatus.FAILED, "failed", id="正常系: FAILEDステータス"),
        ],
    )
    def test_status_values(self, status: ConversionStatus, expected_value: str) -> None:
        assert status.value == expected_value


class TestConversionResult:
    """ConversionResultデータクラスのテスト"""

    @pytest.mark.parametrize(
        "bytes_before,bytes_after,expected",
        [
            pytest.param(100, 50, 0.5, id="正常系: 半分に縮小"),
            pytest.param(100, 150, 1.5, id="正常系: 増加"),
            pytest.param(0, 10, 1.0, id="境界値: 変換前0バイト"),
        ],
    )
    def test_compression_ratio(self, bytes_before: int, bytes_after: int, expected: float) -> None:
        result = ConversionResult(
            source_path=Path("a.tga"),
            dest_path=Path("b.tga"),
            status=ConversionStatus.SUCCESS,
            bytes_before=bytes_before,
            bytes_after=bytes_after,
        )
        assert result.compression_ratio == pytest.approx(expected)

    def test_is_success(self) -> None:
        ok = ConversionResult(Path("a.tga"), Path("b.tga"), ConversionStatus.SUCCESS)
        failed = ConversionResult(Path("a.tga"), None, ConversionStatus.FAILED, "error")
        assert ok.is_success is True
        assert failed.is_success is False

    def test_immutable(self) -> None:
        result = ConversionResult(Path("a.tga"), None, ConversionStatus.SKIPPED)
        with pytest.raises(AttributeError):
            result.message = "changed"  # type: ignore[misc]


class TestBaseConverter:
    """BaseConverterのテスト"""

    def test_cannot_instantiate_abstract_class(self) -> None:
        with pytest.raises(TypeError):
            BaseConverter()  # type: ignore[abstract]

    def test_validate_missing_source(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            MockConverter().convert(tmp_path / "missing.tga", tmp_path / "out.tga")

    def test_validate_directory_source(self, tmp_path: Path) -> None:
        with pytest.raises(ValueError):
            MockConverter().convert(tmp_path, tmp_path / "out.tga")

    def test_get_file_size(self, tmp_path: Path) -> None:
        source = tmp_path / "a.tga"
        source.write_bytes(b"\x00" * 42)
        result = MockConverter().convert(source, tmp_path / "b.tga")
        assert result.bytes_before == 42
