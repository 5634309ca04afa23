"""Lookup and structure helpers shared by provider resources"""
