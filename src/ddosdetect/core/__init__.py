"""Core models and exceptions"""
