"""
LC-3 virtual machine with an interactive single-step debugger.
"""
__version__ = "0.1.0"
