"""
Backend Scripts Module

Available scripts:
    - seed_data.py: Upserts sample profiles and submits sample requests
    
Usage:
    python -m scripts.seed_data
"""
