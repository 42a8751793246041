"""Git Operations Package"""

from ai_commit_msg.git.analyzer import DiffSource, GitAnalyzer, GitError

__all__ = [
    "DiffSource",
    "GitAnalyzer",
    "GitError",
]
