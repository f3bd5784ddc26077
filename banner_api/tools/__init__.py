"""Browser automation tools"""
