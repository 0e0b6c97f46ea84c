# backend/blogapp/graph/__init__.py

"""
コントリビューショングラフ（執筆カレンダー）関連モジュール。

- builder: 日付範囲 + エントリ → 週単位のマス目
- router: グラフページ（GET /）
- viewer: マス選択と投稿表示の状態管理
"""
