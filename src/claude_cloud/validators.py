"""対話入力のバリデーション。

各関数はエラーメッセージ（問題なければ None）を返す。
例外にしないのは、呼び出し側が再入力を促すだけだから。
"""

from __future__ import annotations

from collections.abc import Callable

Validator = Callable[[str], str | None]


def required(label: str) -> Validator:
    def check(value: str) -> str | None:
        if not value.strip():
            return f"{label} is required"
        return None

    return check


def email(value: str) -> str | None:
    if "@" not in value:
        return "Valid email is required"
    return None


def figma_url(value: str) -> str | None:
    if "figma.com" not in value:
        return "Must be a valid Figma URL"
    return None


def optional(_value: str) -> str | None:
    return None
