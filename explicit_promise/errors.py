class ExplicitPromiseError(Exception):
    """ Base class for all explicit_promise errors"""
    pass

class PreconditionError(ExplicitPromiseError, TypeError):
    """ Raised when a value has the wrong shape to be quoted or evaluated"""
    pass

class NameResolutionError(ExplicitPromiseError, NameError):
    """ Raised when a name is bound neither in the data nor in the environment"""

    def __init__(self, message: str, name: str | None = None):
        super().__init__(message)
        self.name = name

class ExpressionSyntaxError(ExplicitPromiseError, SyntaxError):
    """ Raised when expression source text cannot be parsed"""
