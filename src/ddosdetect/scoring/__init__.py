"""DDoS classification engine"""
