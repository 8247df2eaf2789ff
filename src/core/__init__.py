"""Core domain package for textranges.

Core contains range filtering, tree building, collapsing, and plain-text
degradation without any Telegram-specific code, keeping the engine portable.
"""
