"""Feed loading and batch processing"""
