"""Set builder: compose component variants into merchandised set products."""

__version__ = "0.1.0"
