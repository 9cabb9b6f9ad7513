class InvalidArgumentError(ValueError):
    """Raised when a filter is sized or estimated with out-of-range parameters.

    The message names the offending parameter and its value, e.g.
    ``invalid argument p(1.5)``.
    """

    def __init__(self, name: str, value):
        self.name = name
        self.value = value
        super().__init__(f"invalid argument {name}({value})")
