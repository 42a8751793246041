"""
AI Commit Message

Generate commit messages from the staged diff with an LLM provider.
"""

__version__ = "0.4.0"

# Shown as the notification title and in product-identifying request headers
APP_TITLE = "AI Commit"
APP_SLUG = "ai-commit-msg"
