"""
Alert Screener - Indicator and Condition Evaluation Engine

Screens streaming equity price alerts against technical indicators computed
from historical candles (EMA, MACD, VWAP, session range) and classifies each
alert as valid or filtered using an ordered, tolerance-aware rule set.
"""

__version__ = "0.1.0"
__author__ = "Alert Screener Team"
