from .evaluation import value, shifted_value, axis_index
from .interpolation import interp_xf, interp_xc, interp_yf, interp_yc, interp_zf, interp_zc
from .difference import (
    delta_xf, delta_xc, delta_yf, delta_yc, delta_zf, delta_zc,
    ddx_f, ddx_c, ddy_f, ddy_c, ddz_f, ddz_c,
)
from .metrics import Ax_q_fcc, Ay_q_cfc, Az_q_ccf, dx_q_fcc, dx_q_cfc, dy_q_fcc, dy_q_cfc

__all__ = [
    'value', 'shifted_value', 'axis_index',
    'interp_xf', 'interp_xc', 'interp_yf', 'interp_yc', 'interp_zf', 'interp_zc',
    'delta_xf', 'delta_xc', 'delta_yf', 'delta_yc', 'delta_zf', 'delta_zc',
    'ddx_f', 'ddx_c', 'ddy_f', 'ddy_c', 'ddz_f', 'ddz_c',
    'Ax_q_fcc', 'Ay_q_cfc', 'Az_q_ccf', 'dx_q_fcc', 'dx_q_cfc', 'dy_q_fcc', 'dy_q_cfc',
]
