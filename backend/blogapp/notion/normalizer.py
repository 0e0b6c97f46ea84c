# backend/blogapp/notion/normalizer.py

"""
Notion の生オブジェクト（ブロック・プロパティ）を内部モデルへ変換する。

Notion のブロックは type タグごとに中身の形が変わるため、
扱う種別を SUPPORTED_BLOCK_TYPES に閉じ、それ以外は明示的に UNKNOWN へ落とす。
どの関数も例外を投げず、形が想定外なら空文字 / None を返す。
"""

from typing import Any, Dict, Optional

from .schemas import ContentBlock, ContentBlockType

# Notion のブロック type → 内部のブロック種別
SUPPORTED_BLOCK_TYPES: Dict[str, ContentBlockType] = {
    "paragraph": ContentBlockType.PARAGRAPH,
    "heading_3": ContentBlockType.HEADING3,
    "numbered_list_item": ContentBlockType.NUMBERED_LIST_ITEM,
    "bulleted_list_item": ContentBlockType.BULLETED_LIST_ITEM,
}


def join_rich_text(rich_text: Any) -> str:
    """
    rich_text 配列の plain_text を順番どおり区切りなしで連結する。
    """
    if not isinstance(rich_text, list):
        return ""

    parts = []
    for run in rich_text:
        if isinstance(run, dict):
            text = run.get("plain_text")
            if isinstance(text, str):
                parts.append(text)
    return "".join(parts)


def is_supported_block(block: Dict[str, Any]) -> bool:
    return isinstance(block, dict) and block.get("type") in SUPPORTED_BLOCK_TYPES


def normalize_block(block: Dict[str, Any]) -> ContentBlock:
    """
    Notion のブロック 1 件を ContentBlock に変換する。

    未対応の type や壊れたブロックは UNKNOWN（text は空）になる。
    1 ブロックの不備で投稿全体の描画が止まらないようにするため。
    """
    block_type = block.get("type") if isinstance(block, dict) else None
    kind = SUPPORTED_BLOCK_TYPES.get(block_type) if isinstance(block_type, str) else None

    if kind is None:
        return ContentBlock(type=ContentBlockType.UNKNOWN, text="")

    body = block.get(block_type)
    if not isinstance(body, dict):
        return ContentBlock(type=kind, text="")

    return ContentBlock(type=kind, text=join_rich_text(body.get("rich_text")))


def is_full_page(obj: Any) -> bool:
    """
    query / retrieve の結果が properties を含む完全なページかどうか。

    権限のないページなどは id だけの部分オブジェクトで返ってくる。
    """
    return (
        isinstance(obj, dict)
        and obj.get("object") == "page"
        and isinstance(obj.get("properties"), dict)
    )


def extract_first_plain_text(prop: Optional[Dict[str, Any]]) -> Optional[str]:
    """
    rich_text / title プロパティの先頭ランの plain_text を返す。

    空配列・未設定・型違いの場合は None。
    """
    if not isinstance(prop, dict):
        return None

    prop_type = prop.get("type")
    if prop_type not in ("rich_text", "title"):
        return None

    runs = prop.get(prop_type)
    if isinstance(runs, list) and runs:
        first = runs[0]
        if isinstance(first, dict):
            text = first.get("plain_text")
            if isinstance(text, str) and text:
                return text

    return None


def extract_date_start(prop: Optional[Dict[str, Any]]) -> Optional[str]:
    """
    date プロパティの start 値（文字列のまま）を返す。
    """
    if not isinstance(prop, dict) or prop.get("type") != "date":
        return None

    value = prop.get("date")
    if not isinstance(value, dict):
        return None

    start = value.get("start")
    if isinstance(start, str) and start:
        return start
    return None


def extract_title(properties: Dict[str, Any]) -> Optional[str]:
    """
    ページの title 型プロパティから先頭ランの plain_text を返す。

    title プロパティの名前はページの親によって変わる
    （単独ページなら "title"、データベース配下なら "Name" など）ので、
    名前ではなく type で探す。"title" という名前のものを優先する。
    """
    if not isinstance(properties, dict):
        return None

    candidate = properties.get("title")
    if isinstance(candidate, dict) and candidate.get("type") == "title":
        return extract_first_plain_text(candidate)

    for prop in properties.values():
        if isinstance(prop, dict) and prop.get("type") == "title":
            return extract_first_plain_text(prop)

    return None
