class DataUnavailable(RuntimeError):
    """The billing or lease source could not be read; no report should be built."""
