"""
Core domain layer: enums, models and exceptions.
"""
