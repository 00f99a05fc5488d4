"""
DDL generation - Table, view and object scripts from introspected metadata
"""

from .object_source import ObjectSourceBuilder
from .synthesizer import DDLSynthesizer

__all__ = ["DDLSynthesizer", "ObjectSourceBuilder"]
