"""Styled workbook output for donor reports."""
from .writer import ExcelWriter

__all__ = ["ExcelWriter"]
