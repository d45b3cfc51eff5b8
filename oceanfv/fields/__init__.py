from ..grid.locations import Center, Face
from .field import (
    Field, CenterField, XFaceField, YFaceField, ZFaceField, SurfaceField, OneField,
)
from .halos import fill_halo_regions
from .conditional_operation import (
    identity,
    TrueCondition,
    ConditionalOperation,
    validate_condition,
    evaluate_condition,
    condition_operand,
    materialize_condition,
    materialize_condition_inplace,
    condition_onefield,
    conditional_length,
)
from .reductions import field_sum, field_mean, field_maximum, field_minimum

__all__ = [
    'Center', 'Face',
    'Field', 'CenterField', 'XFaceField', 'YFaceField', 'ZFaceField', 'SurfaceField', 'OneField',
    'fill_halo_regions',
    'identity', 'TrueCondition', 'ConditionalOperation',
    'validate_condition', 'evaluate_condition', 'condition_operand',
    'materialize_condition', 'materialize_condition_inplace',
    'condition_onefield', 'conditional_length',
    'field_sum', 'field_mean', 'field_maximum', 'field_minimum',
]
