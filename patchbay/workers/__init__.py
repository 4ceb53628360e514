"""
Workers - adapters and persistence reaching outside the process
"""
