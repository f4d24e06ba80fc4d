"""DDoS Detect command line interface"""
