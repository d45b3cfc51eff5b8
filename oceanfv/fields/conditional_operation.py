"""
Lazy conditional (masked) views of fields.

A ``ConditionalOperation`` reads ``func(operand[i, j, k])`` where a condition
holds and ``mask`` elsewhere. Nothing is computed until the view is indexed
or explicitly materialized.

Example
-------
>>> c = CenterField(grid)
>>> d = condition_operand(lambda x: x + 2, c, lambda i, j, k, grid, co: i < 1, 10.0)
>>> d[0, 0, 0], d[1, 0, 0]
(2.0, 10.0)
"""

import numpy as np

from ..architectures.backends import (
    ifelse, interior_indices, is_jax_array, launch, on_architecture,
)
from ..errors import SizeMismatchError
from .field import Field, OneField


def identity(x):
    return x


class TrueCondition:
    """Condition that holds everywhere."""

    def __call__(self, i, j, k, grid, *args):
        return True

    def __repr__(self):
        return "TrueCondition()"


def _is_array(obj) -> bool:
    return isinstance(obj, np.ndarray) or is_jax_array(obj)


def validate_condition(condition, operand):
    """Reject array conditions whose shape differs from the operand interior."""
    if _is_array(condition):
        if tuple(condition.shape) != tuple(operand.size):
            raise SizeMismatchError(
                f"condition array of shape {tuple(condition.shape)} does not match "
                f"operand size {tuple(operand.size)}")
    elif condition is not None and not callable(condition):
        raise TypeError(f"condition must be a function of (i, j, k, grid, operand), "
                        f"a boolean array or None; got {type(condition).__name__}")
    return condition


def evaluate_condition(condition, i, j, k, grid, *args):
    if condition is None or isinstance(condition, TrueCondition):
        return True
    if _is_array(condition):
        return condition[i, j, k]
    return condition(i, j, k, grid, *args)


class ConditionalOperation:
    """Lazy ``condition ? func(operand) : mask`` view of a field.

    Parameters
    ----------
    operand : Field or lazy field
        Anything with ``grid``, ``location``, ``size`` and ``__getitem__``.
    func : callable
        Unary transform applied where the condition holds.
    condition : callable, boolean array or None
        ``condition(i, j, k, grid, operation) -> bool``, or a boolean array
        with exactly the operand's interior shape. ``None`` means always true.
    mask : scalar
        Value returned where the condition does not hold.

    Raises
    ------
    SizeMismatchError
        If an array condition does not match the operand's interior shape.
    """

    def __init__(self, operand, func=identity, condition=None, mask=0, condition_argument=None):
        self.operand = operand
        self.func = func if func is not None else identity
        self.condition = validate_condition(condition, operand)
        self.mask = mask
        self.grid = operand.grid
        self.location = operand.location
        self.size = operand.size
        # Conditions receive this object unless counting on behalf of another view
        self._condition_argument = condition_argument

    def __getitem__(self, idx):
        i, j, k = idx
        argument = self if self._condition_argument is None else self._condition_argument
        holds = evaluate_condition(self.condition, i, j, k, self.grid, argument)
        return ifelse(holds, self.func(self.operand[i, j, k]), self.mask)

    def with_(self, func=None, condition=None, mask=None):
        """New view on the same operand, replacing the given attributes."""
        return ConditionalOperation(self.operand,
                                    func=self.func if func is None else func,
                                    condition=self.condition if condition is None else condition,
                                    mask=self.mask if mask is None else mask)

    def on_architecture(self, arch):
        return ConditionalOperation(on_architecture(arch, self.operand),
                                    func=self.func,
                                    condition=on_architecture(arch, self.condition),
                                    mask=self.mask)

    def __repr__(self):
        func = getattr(self.func, '__name__', repr(self.func))
        condition = getattr(self.condition, '__name__', None) or type(self.condition).__name__
        return (f"ConditionalOperation at {self.location}\n"
                f"├── operand: {self.operand!r}\n"
                f"├── func: {func}\n"
                f"├── condition: {condition}\n"
                f"└── mask: {self.mask}")


def _compose(outer, inner):
    if outer is identity:
        return inner
    if inner is identity:
        return outer

    def composed(x):
        return outer(inner(x))

    composed.__name__ = f"{getattr(outer, '__name__', 'f')}∘{getattr(inner, '__name__', 'g')}"
    return composed


def condition_operand(func, operand, condition=None, mask=0):
    """Build a conditional view of ``operand``.

    When ``operand`` is itself a ``ConditionalOperation`` and no new condition
    is given, the result keeps the existing condition and applies ``func``
    after the existing transform.
    """
    func = identity if func is None else func

    if isinstance(operand, ConditionalOperation):
        if condition is None:
            return operand.with_(func=_compose(func, operand.func), mask=mask)
        return ConditionalOperation(operand, func=func, condition=condition, mask=mask)

    if condition is None:
        condition = TrueCondition()
    elif _is_array(condition):
        condition = on_architecture(operand.grid.architecture, condition)

    return ConditionalOperation(operand, func=func, condition=condition, mask=mask)


def _evaluate_kernel(i, j, k, grid, c):
    return c[i, j, k]


def materialize_condition(c: ConditionalOperation) -> Field:
    """Evaluate ``c`` at every interior point into a new field."""
    out = Field(c.location, c.grid)
    return launch(c.grid, _evaluate_kernel, out, c)


def materialize_condition_inplace(c: ConditionalOperation):
    """Evaluate ``c`` and overwrite its operand's interior with the result."""
    i, j, k = c.operand.interior_indices()
    values = c[i, j, k]
    c.operand.set_interior(values)
    return c.operand


def condition_onefield(c: ConditionalOperation, mask=0) -> ConditionalOperation:
    """Ones where ``c``'s condition holds, ``mask`` elsewhere."""
    ones = OneField(c.location, c.grid)
    return ConditionalOperation(ones, func=identity, condition=c.condition, mask=mask,
                                condition_argument=c)


def evaluate_interior(c):
    """Host array of ``c`` at every interior point."""
    reduced = tuple(loc is None for loc in c.location)
    i, j, k = interior_indices(c.size, reduced)
    values = c[i, j, k]
    return np.broadcast_to(np.asarray(values), tuple(c.size))


def conditional_length(c: ConditionalOperation, dims=None):
    """Number of interior points where ``c``'s condition holds.

    Parameters
    ----------
    dims : int or tuple of int, optional
        Reduce only over these axes; the result keeps the others.
    """
    counts = evaluate_interior(condition_onefield(c, 0))
    total = np.sum(counts, axis=dims)
    return int(total) if dims is None else total


__all__ = [
    'identity', 'TrueCondition', 'ConditionalOperation',
    'validate_condition', 'evaluate_condition', 'condition_operand',
    'materialize_condition', 'materialize_condition_inplace',
    'condition_onefield', 'conditional_length', 'evaluate_interior',
]
