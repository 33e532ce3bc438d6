"""RLEDecoder / RLEEncoder のテスト

TGA RLEフォーマット:
- 制御バイト c < 128: 生パケット（c+1 ピクセルのリテラル）
- 制御バイト c >= 128: ランパケット（1ピクセルを c-127 回繰り返す）
"""

import io
import random

import pytest

from tgakit.codec.errors import (
    OverrunError,
    PayloadError,
    TruncatedPayload,
    TruncatedStream,
)
from tgakit.codec.rle import MAX_PACKET_PIXELS, RUN_FLAG, RLEDecoder, RLEEncoder


def iter_packets(stream: bytes, channels: int) -> list[tuple[str, int, bytes]]:
    """パケット列を (種別, ピクセル数, ペイロード) のリストに分解する"""
    packets: list[tuple[str, int, bytes]] = []
    pos = 0
    while pos < len(stream):
        control = stream[pos]
        pos += 1
        if control < RUN_FLAG:
            count = control + 1
            packets.append(("raw", count, stream[pos : pos + count * channels]))
            pos += count * channels
        else:
            count = control - 127
            packets.append(("run", count, stream[pos : pos + channels]))
            pos += channels
    return packets


class TestRLEConstants:
    """RLE定数のテスト"""

    def test_max_packet_pixels(self) -> None:
        assert MAX_PACKET_PIXELS == 128
        assert RLEEncoder.MAX_PACKET_PIXELS == 128

    def test_run_flag(self) -> None:
        assert RUN_FLAG == 0x80
        assert RLEDecoder.RUN_FLAG == 0x80


class TestRLEDecoderDecode:
    """RLEDecoder.decode()のテスト"""

    @pytest.fixture
    def decoder(self) -> RLEDecoder:
        return RLEDecoder()

    @pytest.mark.parametrize(
        "stream, width, height, channels, expected",
        [
            pytest.param(
                bytes([129, 30, 20, 10]),
                2,
                1,
                3,
                bytes([30, 20, 10, 30, 20, 10]),
                id="正常系: ランパケット2ピクセル",
            ),
            pytest.param(
                bytes([2, 1, 2, 3, 4, 5, 6, 7, 8, 9]),
                3,
                1,
                3,
                bytes([1, 2, 3, 4, 5, 6, 7, 8, 9]),
                id="正常系: 生パケット3ピクセル",
            ),
            pytest.param(
                bytes([0, 7, 130, 9]),
                2,
                2,
                1,
                bytes([7, 9, 9, 9]),
                id="正常系: 生パケットとランパケットの混在",
            ),
            pytest.param(
                bytes([255, 1, 2, 3, 4]),
                128,
                1,
                4,
                bytes([1, 2, 3, 4]) * 128,
                id="正常系: 最大長ランパケット",
            ),
            pytest.param(
                bytes([127]) + bytes(range(128)),
                16,
                8,
                1,
                bytes(range(128)),
                id="正常系: 最大長生パケット",
            ),
        ],
    )
    def test_decode(
        self,
        decoder: RLEDecoder,
        stream: bytes,
        width: int,
        height: int,
        channels: int,
        expected: bytes,
    ) -> None:
        assert decoder.decode(stream, width, height, channels) == expected

    def test_decode_from_stream(self, decoder: RLEDecoder) -> None:
        """ストリームから読み、パケット列の直後で読み込みを止めることを確認する"""
        source = io.BytesIO(bytes([129, 5]) + b"TRAILER")
        assert decoder.decode(source, 2, 1, 1) == bytes([5, 5])
        assert source.read() == b"TRAILER"

    def test_decode_into_preallocated_buffer(self, decoder: RLEDecoder) -> None:
        """確保済みのバッファを直接埋めることを確認する"""
        buffer = bytearray(6)
        decoder.decode_into(bytes([130, 1, 2]), buffer, 2)
        assert buffer == bytearray([1, 2, 1, 2, 1, 2])

    @pytest.mark.parametrize(
        "stream",
        [
            pytest.param(b"", id="異常系: 空のストリーム"),
            pytest.param(bytes([1, 10, 20, 30]), id="異常系: 生パケットのリテラル不足"),
            pytest.param(bytes([130]), id="異常系: ランパケットのピクセル不足"),
            pytest.param(bytes([129, 10, 20, 30]), id="異常系: 次の制御バイトがない"),
            pytest.param(bytes([130, 10, 20]), id="異常系: ランピクセルが途中で途切れる"),
        ],
    )
    def test_decode_truncated(self, decoder: RLEDecoder, stream: bytes) -> None:
        """入力が途中で尽きるとTruncatedStreamが発生することを確認する"""
        with pytest.raises(TruncatedStream):
            decoder.decode(stream, 4, 1, 3)

    def test_truncated_stream_is_truncated_payload(self, decoder: RLEDecoder) -> None:
        with pytest.raises(TruncatedPayload):
            decoder.decode(b"", 1, 1, 1)

    @pytest.mark.parametrize(
        "stream",
        [
            pytest.param(bytes([0, 1, 130, 2]), id="異常系: 最後のランパケットが超過"),
            pytest.param(bytes([3, 1, 2, 3, 4]), id="異常系: 生パケットが超過"),
            pytest.param(bytes([255, 9]), id="異常系: 最初のパケットで超過"),
        ],
    )
    def test_decode_overrun(self, decoder: RLEDecoder, stream: bytes) -> None:
        """幅×高さを超えるパケットでOverrunErrorが発生することを確認する"""
        with pytest.raises(OverrunError):
            decoder.decode(stream, 3, 1, 1)

    def test_overrun_packet_is_not_applied(self, decoder: RLEDecoder) -> None:
        """超過したパケットはバッファに一切書き込まれないことを確認する"""
        buffer = bytearray(3)
        with pytest.raises(OverrunError):
            decoder.decode_into(bytes([0, 1, 130, 2]), buffer, 1)
        assert buffer == bytearray([1, 0, 0])

    def test_decode_into_rejects_misaligned_buffer(self, decoder: RLEDecoder) -> None:
        with pytest.raises(ValueError):
            decoder.decode_into(bytes([0, 1]), bytearray(5), 3)


class TestRLEEncoderEncode:
    """RLEEncoder.encode()のテスト"""

    @pytest.fixture
    def encoder(self) -> RLEEncoder:
        return RLEEncoder()

    def test_encode_two_equal_pixels(self, encoder: RLEEncoder) -> None:
        """同じ色の2ピクセルが1つのランパケットになることを確認する"""
        buffer = bytes([30, 20, 10, 30, 20, 10])
        assert encoder.encode(buffer, 2, 1, 3) == bytes([129, 30, 20, 10])

    def test_encode_three_distinct_pixels(self, encoder: RLEEncoder) -> None:
        """異なる色の3ピクセルが1つの生パケットになることを確認する"""
        buffer = bytes([1, 2, 3, 4, 5, 6, 7, 8, 9])
        assert encoder.encode(buffer, 3, 1, 3) == bytes([2]) + buffer

    def test_encode_single_pixel(self, encoder: RLEEncoder) -> None:
        """1x1画像が制御バイト0の生パケットになることを確認する"""
        assert encoder.encode(bytes([1, 2, 3, 4]), 1, 1, 4) == bytes([0, 1, 2, 3, 4])

    @pytest.mark.parametrize(
        "pixels, expected",
        [
            pytest.param(
                [1, 2, 2],
                bytes([0, 1, 129, 2]),
                id="正常系: 生パケットの直後に重複ペア",
            ),
            pytest.param(
                [1, 1, 2],
                bytes([129, 1, 0, 2]),
                id="正常系: 重複ペアの直後に単独ピクセル",
            ),
            pytest.param(
                [1, 2, 3, 3, 3, 4, 5],
                bytes([1, 1, 2, 130, 3, 1, 4, 5]),
                id="正常系: 生・ラン・生",
            ),
            pytest.param(
                [5, 5, 5, 5],
                bytes([131, 5]),
                id="正常系: 全ピクセル同色",
            ),
            pytest.param(
                [1, 1, 2, 2],
                bytes([129, 1, 129, 2]),
                id="正常系: 重複ペアの連続",
            ),
        ],
    )
    def test_encode_greedy_packets(
        self, encoder: RLEEncoder, pixels: list[int], expected: bytes
    ) -> None:
        """貪欲なパケット分割がされることを確認する（グレースケール）"""
        assert encoder.encode(bytes(pixels), len(pixels), 1, 1) == expected

    def test_encode_long_run_is_split(self, encoder: RLEEncoder) -> None:
        """128を超える同色ピクセルが複数のランパケットに分割されることを確認する"""
        stream = encoder.encode(bytes([7]) * 300, 300, 1, 1)
        assert iter_packets(stream, 1) == [
            ("run", 128, bytes([7])),
            ("run", 128, bytes([7])),
            ("run", 44, bytes([7])),
        ]

    def test_encode_long_literal_is_split(self, encoder: RLEEncoder) -> None:
        """128を超える異なるピクセルが複数の生パケットに分割されることを確認する"""
        buffer = bytes(i % 251 for i in range(200))
        stream = encoder.encode(buffer, 200, 1, 1)
        packets = iter_packets(stream, 1)
        assert [(kind, count) for kind, count, _ in packets] == [("raw", 128), ("raw", 72)]

    def test_encode_compares_whole_pixels(self, encoder: RLEEncoder) -> None:
        """一部のチャンネルだけが等しいピクセルはランにならないことを確認する"""
        buffer = bytes([1, 2, 3, 1, 2, 4])
        assert encoder.encode(buffer, 2, 1, 3) == bytes([1]) + buffer

    @pytest.mark.parametrize(
        "buffer, width, height, channels",
        [
            pytest.param(b"\x00" * 5, 2, 1, 3, id="異常系: バッファが短い"),
            pytest.param(b"\x00" * 7, 2, 1, 3, id="異常系: バッファが長い"),
        ],
    )
    def test_encode_rejects_size_mismatch(
        self, encoder: RLEEncoder, buffer: bytes, width: int, height: int, channels: int
    ) -> None:
        with pytest.raises(PayloadError):
            encoder.encode(buffer, width, height, channels)


class TestRLERoundTrip:
    """圧縮・解凍の往復テスト"""

    @pytest.mark.parametrize("channels", [1, 3, 4])
    @pytest.mark.parametrize("seed", [0, 1, 2])
    def test_random_buffers(self, channels: int, seed: int) -> None:
        """ランダムな画像（同色の連続を含む）が往復で一致することを確認する"""
        rng = random.Random(seed)
        width, height = rng.randint(1, 64), rng.randint(1, 64)
        palette = [bytes(rng.randrange(256) for _ in range(channels)) for _ in range(4)]
        buffer = bytearray()
        while len(buffer) < width * height * channels:
            buffer += rng.choice(palette) * rng.randint(1, 200)
        buffer = buffer[: width * height * channels]

        stream = RLEEncoder().encode(buffer, width, height, channels)

        packets = iter_packets(stream, channels)
        assert all(1 <= count <= MAX_PACKET_PIXELS for _, count, _ in packets)
        assert sum(count for _, count, _ in packets) == width * height
        assert RLEDecoder().decode(stream, width, height, channels) == buffer

    def test_reencode_is_stable(self) -> None:
        """解凍したデータを再圧縮すると同じパケット列になることを確認する"""
        buffer = bytes([1, 1, 1, 2, 3, 4, 4, 5] * 40)
        stream = RLEEncoder().encode(buffer, 320, 1, 1)
        decoded = RLEDecoder().decode(stream, 320, 1, 1)
        assert RLEEncoder().encode(decoded, 320, 1, 1) == stream
