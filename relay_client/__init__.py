"""
Relay Client

Interactive terminal client for newline-delimited text chat relays.
"""
