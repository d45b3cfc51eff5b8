from .backends import (
    AbstractArchitecture,
    CPU,
    GPU,
    array_module,
    architecture_of,
    is_jax_array,
    on_architecture,
    ifelse,
    interior_indices,
    launch,
)

__all__ = [
    'AbstractArchitecture', 'CPU', 'GPU',
    'array_module', 'architecture_of', 'is_jax_array',
    'on_architecture', 'ifelse', 'interior_indices', 'launch',
]
