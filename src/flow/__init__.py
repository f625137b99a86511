"""
flow - 터미널용 실시간 로그 분석 도구
"""

__version__ = "0.1.0"
