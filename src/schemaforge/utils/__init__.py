"""
Utilities - SQL text helpers
"""
