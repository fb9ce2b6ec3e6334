"""Error types shared across the regulation encodings."""


class ConfigurationError(Exception):
    """Raised when regulation data (rules, questions, scenarios) is malformed.

    Configuration errors are fatal at load or traversal time; callers must not
    fall back to a verdict when one is raised.
    """

    pass
