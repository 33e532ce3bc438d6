"""逐次入出力用のヘルパー

入力は read() を持つバイナリストリームであればよく、ランダムアクセスは要求しない。
readinto() を持つストリームでは中間バッファを作らずに読み込む。
"""

import io
from typing import BinaryIO

from tgakit.codec.errors import SinkUnavailable


def as_reader(source: BinaryIO | bytes | bytearray | memoryview) -> BinaryIO:
    """バイト列ならBytesIOで包み、ストリームならそのまま返す"""
    if isinstance(source, (bytes, bytearray, memoryview)):
        return io.BytesIO(source)
    return source


def read_exact(reader: BinaryIO, size: int) -> bytes:
    """sizeバイトを読み出す

    短い読み込みは繰り返して補う。入力が尽きた場合は読めた分だけを返すため、
    呼び出し側で長さを確認すること。
    """
    chunks: list[bytes] = []
    remaining = size
    while remaining > 0:
        chunk = reader.read(remaining)
        if not chunk:
            break
        chunks.append(chunk)
        remaining -= len(chunk)
    return b"".join(chunks)


def readinto_exact(reader: BinaryIO, buffer: bytearray) -> int:
    """バッファを埋めるまで読み込み、読み込んだバイト数を返す

    readinto() を持たないストリームは read_exact() で読んでからコピーする。
    """
    if not hasattr(reader, "readinto"):
        data = read_exact(reader, len(buffer))
        buffer[: len(data)] = data
        return len(data)

    view = memoryview(buffer)
    filled = 0
    while filled < len(buffer):
        count = reader.readinto(view[filled:])
        if not count:
            break
        filled += count
    return filled


def write_all(writer: BinaryIO, data: bytes | bytearray) -> None:
    """dataをすべて書き込む

    短い書き込みは繰り返して補う。

    Raises:
        SinkUnavailable: 書き込み先が1バイトも受け付けなくなった場合
    """
    view = memoryview(data)
    written = 0
    while written < len(view):
        count = writer.write(view[written:])
        if not count:
            raise SinkUnavailable(f"書き込みが途中で止まりました: {written}/{len(view)}バイト")
        written += count
