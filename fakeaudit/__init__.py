"""fakeaudit — heuristic detector for fake and placeholder code in shell scripts."""

__app_name__ = "fakeaudit"
__version__ = "3.1.0"
