"""
Sync — Upstream rebase orchestration and internal-mirror update.
"""
