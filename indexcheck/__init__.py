"""indexcheck — verify deployed composite indexes against a checked-in spec."""

__version__ = "0.1.0"
