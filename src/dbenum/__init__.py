"""dbenum - compile database lookup tables into enumerations and accessor methods."""

__version__ = "0.1.0"
