"""バリデーション機能を提供するミックスイン

入力メッセージや設定ファイルなど、エンジンの外側から来るデータの
形式チェックに使用します。エンジン内部（探索・検証）では例外を投げません。
"""
from typing import Any, List, Optional, Union


class ValidationError(Exception):
    """バリデーションエラー"""
    pass


class ValidationMixin:
    """バリデーション機能を提供するミックスイン

    使用例:
        class MyCodec(ValidationMixin):
            def decode(self, data: dict):
                self.validate_type(data, dict, "data")
                self.validate_required_keys(data, ["id", "name"])
    """

    def validate_not_none(self, value: Any, name: str) -> Any:
        """値がNoneでないことを検証

        Raises:
            ValidationError: 値がNoneの場合
        """
        if value is None:
            raise ValidationError(f"{name}はNoneにできません")
        return value

    def validate_type(
        self,
        value: Any,
        expected_type: Union[type, tuple],
        name: str
    ) -> Any:
        """値の型を検証

        Args:
            value: 検証する値
            expected_type: 期待する型（またはタプル）
            name: 値の名前

        Returns:
            検証済みの値

        Raises:
            ValidationError: 型が一致しない場合
        """
        if not isinstance(value, expected_type):
            type_name = (
                expected_type.__name__
                if hasattr(expected_type, '__name__')
                else str(expected_type)
            )
            raise ValidationError(
                f"{name}は{type_name}型である必要があります。"
                f"実際の型: {type(value).__name__}"
            )
        return value

    def validate_range(
        self,
        value: Union[int, float],
        min_value: Optional[Union[int, float]] = None,
        max_value: Optional[Union[int, float]] = None,
        name: str = "value"
    ) -> Union[int, float]:
        """数値の範囲を検証

        Args:
            value: 検証する値
            min_value: 最小値（含む）
            max_value: 最大値（含む）
            name: 値の名前

        Raises:
            ValidationError: 範囲外の場合
        """
        if min_value is not None and value < min_value:
            raise ValidationError(
                f"{name}は{min_value}以上である必要があります。"
                f"実際の値: {value}"
            )

        if max_value is not None and value > max_value:
            raise ValidationError(
                f"{name}は{max_value}以下である必要があります。"
                f"実際の値: {value}"
            )

        return value

    def validate_in_choices(
        self,
        value: Any,
        choices: Union[list, set, tuple],
        name: str = "value"
    ) -> Any:
        """値が選択肢に含まれることを検証

        Raises:
            ValidationError: 選択肢に含まれない場合
        """
        if value not in choices:
            raise ValidationError(
                f"{name}は次の選択肢から選ぶ必要があります: {choices}。"
                f"実際の値: {value}"
            )
        return value

    def validate_required_keys(
        self,
        data: dict,
        required_keys: List[str],
        name: str = "data"
    ) -> dict:
        """必須キーの存在を検証

        Args:
            data: 検証する辞書
            required_keys: 必須キーのリスト
            name: 辞書の名前

        Raises:
            ValidationError: 必須キーが存在しない場合
        """
        missing_keys = [key for key in required_keys if key not in data]

        if missing_keys:
            raise ValidationError(
                f"{name}に必須キーが不足しています: {missing_keys}"
            )

        return data
