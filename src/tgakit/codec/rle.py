"""RLE圧縮・解凍モジュール

TGA形式（画像タイプ10/11）で使用されるピクセル単位のランレングス符号化を扱う。

パケット構造:
- 制御バイト c < 128: 生パケット。続く c+1 ピクセル分のリテラルをそのままコピーする
- 制御バイト c >= 128: ランパケット。続く1ピクセルを c-127 回繰り返す
"""

from typing import BinaryIO, Protocol

from tgakit.codec.errors import OverrunError, PayloadError, TruncatedStream
from tgakit.codec.stream import as_reader, read_exact


class RLEDecoderProtocol(Protocol):
    """RLE解凍インターフェース"""

    def decode(
        self, source: BinaryIO | bytes, width: int, height: int, channels: int
    ) -> bytearray:
        """RLEパケット列を解凍する

        Args:
            source: パケット列を読み出す入力（またはバイト列）
            width: 画像の幅
            height: 画像の高さ
            channels: ピクセルあたりのバイト数

        Returns:
            width * height * channels バイトのピクセルデータ

        Raises:
            TruncatedStream: パケットの途中で入力が尽きた場合
            OverrunError: ピクセル数が width * height を超える場合
        """
        ...


class RLEEncoderProtocol(Protocol):
    """RLE圧縮インターフェース"""

    def encode(self, buffer: bytes, width: int, height: int, channels: int) -> bytes:
        """ピクセルデータをRLEパケット列に圧縮する

        Args:
            buffer: width * height * channels バイトのピクセルデータ
            width: 画像の幅
            height: 画像の高さ
            channels: ピクセルあたりのバイト数

        Returns:
            RLEパケット列
        """
        ...


MAX_PACKET_PIXELS: int = 128
"""1パケットで表せる最大ピクセル数"""

RUN_FLAG: int = 0x80
"""ランパケットを示す制御バイトの最上位ビット"""


class RLEDecoder:
    """RLE解凍クラス

    パケットは不可分に扱う。パケット全体を読み出して範囲を確認してから
    バッファに書き込むため、失敗したパケットの一部だけが書き込まれることはない。
    """

    MAX_PACKET_PIXELS: int = MAX_PACKET_PIXELS
    RUN_FLAG: int = RUN_FLAG

    def decode(
        self, source: BinaryIO | bytes, width: int, height: int, channels: int
    ) -> bytearray:
        """RLEパケット列を解凍して新しいバッファを返す

        Args:
            source: パケット列を読み出す入力（またはバイト列）
            width: 画像の幅
            height: 画像の高さ
            channels: ピクセルあたりのバイト数

        Returns:
            width * height * channels バイトのピクセルデータ

        Raises:
            TruncatedStream: パケットの途中で入力が尽きた場合
            OverrunError: ピクセル数が width * height を超える場合
        """
        buffer = bytearray(width * height * channels)
        self.decode_into(source, buffer, channels)
        return buffer

    def decode_into(self, source: BinaryIO | bytes, buffer: bytearray, channels: int) -> None:
        """RLEパケット列を解凍して確保済みのバッファを埋める

        バッファ長 / channels をピクセル数として、ちょうどその数だけ解凍する。

        Args:
            source: パケット列を読み出す入力（またはバイト列）
            buffer: 書き込み先のバッファ
            channels: ピクセルあたりのバイト数

        Raises:
            ValueError: バッファ長がchannelsの倍数でない場合
            TruncatedStream: パケットの途中で入力が尽きた場合
            OverrunError: ピクセル数がバッファを超える場合
        """
        if channels <= 0 or len(buffer) % channels != 0:
            raise ValueError(f"バッファ長がピクセルサイズの倍数ではありません: {len(buffer)}")

        reader = as_reader(source)
        total_pixels = len(buffer) // channels
        current_pixel = 0

        while current_pixel < total_pixels:
            control = reader.read(1)
            if not control:
                raise TruncatedStream(
                    f"不完全なRLEデータ: 制御バイトが不足しています"
                    f"（{current_pixel}/{total_pixels}ピクセル）"
                )

            header_byte = control[0]
            if header_byte < self.RUN_FLAG:
                # 生パケット
                count = header_byte + 1
                payload = read_exact(reader, count * channels)
                if len(payload) != count * channels:
                    raise TruncatedStream("不完全なRLEデータ: リテラルピクセルが不足しています")
            else:
                # ランパケット
                count = header_byte - (self.RUN_FLAG - 1)
                payload = read_exact(reader, channels)
                if len(payload) != channels:
                    raise TruncatedStream("不完全なRLEデータ: ランピクセルが不足しています")
                payload = payload * count

            if current_pixel + count > total_pixels:
                raise OverrunError(
                    f"RLEデータが画像サイズを超えています: "
                    f"{current_pixel + count} > {total_pixels}ピクセル"
                )

            start = current_pixel * channels
            buffer[start : start + len(payload)] = payload
            current_pixel += count


class RLEEncoder:
    """RLE圧縮クラス

    ピクセル列を先頭から一度だけ走査し、貪欲にパケットを決定する。
    - 現在のピクセルと次のピクセルが等しければランパケットを開き、最大128まで伸ばす
    - 等しくなければ生パケットを蓄積し、前方に同一ピクセルの組が現れた時点で閉じる
    後戻りはしないため、最小サイズは保証しない。
    """

    MAX_PACKET_PIXELS: int = MAX_PACKET_PIXELS
    RUN_FLAG: int = RUN_FLAG

    def encode(self, buffer: bytes, width: int, height: int, channels: int) -> bytes:
        """ピクセルデータをRLEパケット列に圧縮する

        Args:
            buffer: width * height * channels バイトのピクセルデータ
            width: 画像の幅
            height: 画像の高さ
            channels: ピクセルあたりのバイト数

        Returns:
            RLEパケット列

        Raises:
            PayloadError: バッファ長が width * height * channels と一致しない場合
        """
        total_pixels = width * height
        if channels <= 0 or len(buffer) != total_pixels * channels:
            raise PayloadError(
                f"バッファ長が画像サイズと一致しません: "
                f"{len(buffer)} != {width}x{height}x{channels}"
            )

        data = bytes(buffer)
        output = bytearray()
        current_pixel = 0

        def same(a: int, b: int) -> bool:
            lhs = a * channels
            rhs = b * channels
            return data[lhs : lhs + channels] == data[rhs : rhs + channels]

        while current_pixel < total_pixels:
            start = current_pixel * channels

            if current_pixel + 1 < total_pixels and same(current_pixel, current_pixel + 1):
                run_length = 2
                while (
                    current_pixel + run_length < total_pixels
                    and run_length < self.MAX_PACKET_PIXELS
                    and same(current_pixel, current_pixel + run_length)
                ):
                    run_length += 1
                output.append(run_length + self.RUN_FLAG - 1)
                output += data[start : start + channels]
                current_pixel += run_length
            else:
                literal_count = 1
                while (
                    current_pixel + literal_count < total_pixels
                    and literal_count < self.MAX_PACKET_PIXELS
                ):
                    next_pixel = current_pixel + literal_count
                    # 同一ピクセルの組は次のランパケットに回す
                    if next_pixel + 1 < total_pixels and same(next_pixel, next_pixel + 1):
                        break
                    literal_count += 1
                output.append(literal_count - 1)
                output += data[start : start + literal_count * channels]
                current_pixel += literal_count

        if current_pixel != total_pixels:
            raise PayloadError(f"RLE圧縮のピクセル数が一致しません: {current_pixel} != {total_pixels}")

        return bytes(output)
