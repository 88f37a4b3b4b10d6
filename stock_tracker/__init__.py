"""
Stock Tracker - quota-aware, rate-limited, cached quote client
"""
__version__ = "1.0.0"
