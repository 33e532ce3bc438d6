"""TGAコーデックの例外定義

読み込み・書き出し処理で発生するエラーを種類ごとに定義する。
呼び出し側は TGAError で一括して捕捉するか、
個別のサブクラスで特定の失敗（パレット画像非対応など）を判別できる。
"""


class TGAError(Exception):
    """TGAコーデックの基底例外"""

    pass


class SourceUnavailable(TGAError, OSError):
    """入力元を開けない、または読み込めない場合のエラー"""

    pass


class SinkUnavailable(TGAError, OSError):
    """出力先を開けない、または書き込めない場合のエラー"""

    pass


class HeaderError(TGAError, ValueError):
    """ヘッダーが不正な場合のエラー

    幅・高さ・ビット深度・画像タイプのいずれかが検証に失敗した場合に送出される。
    """

    pass


class TruncatedHeader(HeaderError):
    """ヘッダーが18バイトに満たない場合のエラー"""

    pass


class UnsupportedTypeCode(HeaderError):
    """非対応の画像タイプコードの場合のエラー

    インデックスカラー（パレット）画像などを呼び出し側で判別できるよう、
    一般的なヘッダーエラーとは別の型として定義する。

    Attributes:
        type_code: ヘッダーに格納されていた画像タイプコード
    """

    def __init__(self, type_code: int) -> None:
        self.type_code = type_code
        super().__init__(f"非対応の画像タイプです: {type_code}")


class PayloadError(TGAError, ValueError):
    """ピクセルデータが不正な場合のエラー"""

    pass


class TruncatedPayload(PayloadError):
    """ピクセルデータが宣言されたサイズより短い場合のエラー"""

    pass


class TruncatedStream(TruncatedPayload):
    """RLEパケットの途中で入力が尽きた場合のエラー"""

    pass


class OverrunError(PayloadError):
    """RLEストリームが幅×高さを超えるピクセルを書き込もうとした場合のエラー"""

    pass
