"""
Conditional reductions over field interiors.

``field_mean(T, condition=T_warm)`` averages only where the condition holds;
the count comes from ``conditional_length`` under the same condition.
"""

import numpy as np

from .conditional_operation import (
    condition_operand, conditional_length, evaluate_interior, identity,
)


def _reduce(reduction, field, func, condition, mask, dims):
    c = condition_operand(func, field, condition, mask)
    values = evaluate_interior(c)
    result = reduction(values, axis=dims)
    return float(result) if dims is None else result


def field_sum(field, func=identity, condition=None, mask=0, dims=None):
    """Sum of ``func(field)`` over interior points where ``condition`` holds."""
    return _reduce(np.sum, field, func, condition, mask, dims)


def field_maximum(field, func=identity, condition=None, mask=-np.inf, dims=None):
    return _reduce(np.max, field, func, condition, mask, dims)


def field_minimum(field, func=identity, condition=None, mask=np.inf, dims=None):
    return _reduce(np.min, field, func, condition, mask, dims)


def field_mean(field, func=identity, condition=None, dims=None):
    """Mean of ``func(field)`` over the points where ``condition`` holds.

    Returns NaN where no point satisfies the condition.
    """
    c = condition_operand(func, field, condition, 0)
    total = np.sum(evaluate_interior(c), axis=dims)
    count = conditional_length(c, dims)
    with np.errstate(invalid='ignore', divide='ignore'):
        mean = np.divide(total, count)
    return float(mean) if dims is None else mean


__all__ = ['field_sum', 'field_mean', 'field_maximum', 'field_minimum']
