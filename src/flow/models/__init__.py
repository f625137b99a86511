"""
데이터 모델 모듈
"""

from .line import Line, Segment, Style

__all__ = ["Line", "Segment", "Style"]
