"""プレゼンテーション層"""
