# backend/blogapp/notion/__init__.py

"""
Notion 連携用モジュール群。

主な責務:
- Notion API からデータベース・ページ・ブロックを読み取る（読み取り専用）
- ブロック / プロパティを内部モデル（ContentBlock, EntrySummary, PostDocument）に変換する
- /api/posts/{post_id} エンドポイントを公開する
"""
