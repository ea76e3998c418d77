"""
Utility Kernel

Foundation layer for utility-cost allocation:
- Money and Currency value objects (Decimal only, ISO 4217)
- Typed exception hierarchy with machine-readable codes
- Structured JSON logging
"""

__version__ = "0.1.0"
