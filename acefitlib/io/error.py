class ExitFunc(Exception):
    """Raised by a section whose group is absent from the input, so it is skipped."""
    pass
