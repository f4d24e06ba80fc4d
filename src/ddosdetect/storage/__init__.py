"""Verdict persistence"""
