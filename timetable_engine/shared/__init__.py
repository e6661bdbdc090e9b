"""共有モジュール"""
