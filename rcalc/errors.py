"""Exception types raised by the calculator."""


class RCalcError(Exception):
    """Base class for calculator errors."""


class ConstraintParseError(RCalcError, ValueError):
    """A bound could not be parsed into a constraint."""


class ExpressionSyntaxError(ConstraintParseError):
    """The expression side of a bound is not a valid arithmetic expression."""


class UnboundVariableError(RCalcError, LookupError):
    """A constraint references a name that no configured slot provides."""


class SlotLimitError(RCalcError, ValueError):
    """More slots were requested than there are slot variable names."""


class ExpressionEvaluationError(RCalcError, ArithmeticError):
    """An expression failed to evaluate for a particular set of values."""


class SearchCancelled(RCalcError):
    """The search was stopped by its cancel callback before completing."""
