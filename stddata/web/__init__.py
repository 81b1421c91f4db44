"""
general-purpose support for building the web interface to the data providers
"""
