"""
Courtbook - slot availability and booking eligibility engine for
sports facilities.
"""
