# backend/blogapp/utils/config.py

"""
環境変数読み取り用のユーティリティ。
Notion 連携・グラフ描画・キャッシュ設定で共通利用する。
"""

import os
from datetime import date
from typing import Optional


class ConfigurationError(RuntimeError):
    """必須の設定値が欠けている・不正な場合の基底例外。"""


class EnvVarMissingError(ConfigurationError):
    """必須環境変数が設定されていない場合に投げる例外。"""

    def __init__(self, name: str) -> None:
        super().__init__(f"Required environment variable '{name}' is not set.")
        self.name = name


def get_env(
    name: str,
    default: Optional[str] = None,
    *,
    required: bool = True,
) -> Optional[str]:
    """
    環境変数を取得するヘルパー。

    :param name: 環境変数名
    :param default: デフォルト値（required=False の場合のみ使用）
    :param required: True の場合、未設定なら例外を投げる
    :return: 文字列値
    """
    value = os.getenv(name)

    if value is None or value == "":
        if required:
            raise EnvVarMissingError(name)
        return default

    return value


def get_env_int(name: str, default: int) -> int:
    """
    整数値の環境変数を取得するヘルパー。

    不正な値が入っていた場合は ConfigurationError にする。
    """
    raw = get_env(name, required=False)
    if raw is None:
        return default

    try:
        return int(raw)
    except ValueError as exc:  # noqa: TRY003
        raise ConfigurationError(
            f"Invalid integer value for env var {name}: {raw!r}"
        ) from exc


def get_env_date(name: str, default: date) -> date:
    """
    YYYY-MM-DD 形式の日付を環境変数から取得する。
    """
    raw = get_env(name, required=False)
    if raw is None:
        return default

    try:
        return date.fromisoformat(raw)
    except ValueError as exc:  # noqa: TRY003
        raise ConfigurationError(
            f"Invalid date value for env var {name}: {raw!r}"
        ) from exc
