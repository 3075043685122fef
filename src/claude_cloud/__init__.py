"""claude-cloud: Claude CLI に作業を丸投げするための小さなラッパー群。"""

__version__ = "1.0.0"
