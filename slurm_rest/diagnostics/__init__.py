"""
Diagnostic tools for debugging slurmrestd connectivity and jobs.
"""

from .debugger import SlurmRestDebugger

__all__ = ["SlurmRestDebugger"]
