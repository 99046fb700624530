"""Static phrase tables for the dictionary strategy and cache preloading.

Tables are keyed by target language and map primary-language (Chinese) phrases to
their translation.
"""

from __future__ import annotations

from typing import Final

__all__: list[str] = ["COMMON_TRANSLATIONS", "PHRASE_TABLES"]

# Site navigation and status words; preloaded into the cache at start-up.
COMMON_TRANSLATIONS: Final[dict[str, dict[str, str]]] = {
    "en": {
        "首頁": "Home",
        "關於": "About",
        "專案": "Projects",
        "文章": "Articles",
        "聯絡": "Contact",
        "閱讀更多": "Read More",
        "返回": "Back",
        "下一頁": "Next",
        "上一頁": "Previous",
        "搜尋": "Search",
        "標籤": "Tags",
        "分類": "Categories",
        "日期": "Date",
        "作者": "Author",
        "載入中...": "Loading...",
        "錯誤": "Error",
        "成功": "Success",
        "失敗": "Failed",
        "完成": "Completed",
    },
}

PHRASE_TABLES: Final[dict[str, dict[str, str]]] = {
    "en": {
        **COMMON_TRANSLATIONS["en"],
        "部落格": "Blog",
        "發布於": "Published on",
        "更新於": "Updated on",
        "正在翻譯...": "Translating...",
        "歡迎來到我的網站": "Welcome to my website",
        "這是我的個人部落格": "This is my personal blog",
        "技術分享": "Tech Sharing",
        "生活記錄": "Life Records",
        "學習筆記": "Study Notes",
        "專案展示": "Project Showcase",
        "分鐘前": "minutes ago",
        "小時前": "hours ago",
        "天前": "days ago",
        "週前": "weeks ago",
        "月前": "months ago",
        "年前": "years ago",
        "點擊": "Click",
        "查看": "View",
        "編輯": "Edit",
        "刪除": "Delete",
        "新增": "Add",
        "儲存": "Save",
        "取消": "Cancel",
        "確認": "Confirm",
        "沒有找到相關內容": "No related content found",
        "載入失敗": "Failed to load",
        "網路錯誤": "Network error",
        "請稍後再試": "Please try again later",
    },
}
