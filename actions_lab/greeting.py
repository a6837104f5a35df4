from __future__ import annotations

from typing import Optional

GREETING = "Hello, World!"


def render_greeting(name: Optional[str] = None) -> str:
    who = (name or "").strip()
    if not who:
        return GREETING
    return f"Hello, {who}!"


def main() -> int:
    print(GREETING)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
