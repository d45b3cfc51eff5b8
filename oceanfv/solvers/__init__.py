"""
Linear solvers for the implicit free surface.
"""

from .pcg import PCGResult, pcg
from .fft_poisson import FFTBasedPoissonSolver, laplacian_eigenvalues
from .sparse import SparseMatrixSolver, assemble_free_surface_matrix

__all__ = [
    'PCGResult', 'pcg',
    'FFTBasedPoissonSolver', 'laplacian_eigenvalues',
    'SparseMatrixSolver', 'assemble_free_surface_matrix',
]
