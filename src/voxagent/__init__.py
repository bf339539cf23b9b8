"""
Voice agent service.

Routes a natural-language request either to a direct chat reply or to
a bounded tool-calling loop against an external tool backend, and
serves the result over a small FastAPI app.
"""

__version__ = "0.1.0"
