"""ドメイン層"""
