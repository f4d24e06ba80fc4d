"""NVD API and feed clients"""
