"""JAX configuration for accelerator execution: 64-bit precision and device selection."""

import os
from typing import Optional

from loguru import logger

from ..errors import ConfigurationError

# Device must be chosen BEFORE JAX initializes its backends
_device_configured = False


def select_device(device: Optional[str] = None) -> Optional[int]:
    """Select the CUDA device used by JAX.

    Parameters
    ----------
    device : str, optional
        Device specification:
        - None or "auto": leave the JAX default untouched
        - "cpu": force CPU
        - "0", "1", etc.: specific GPU index
        - "cuda:0", "gpu:1", etc.: specific GPU with prefix

    Returns
    -------
    gpu_id : int or None
        Selected GPU ID, or None if CPU / default was selected.

    Notes
    -----
    Only effective before the first JAX computation. Sets the
    CUDA_VISIBLE_DEVICES environment variable.
    """
    global _device_configured

    if _device_configured:
        return None

    if device is None or device == "auto":
        _device_configured = True
        return None

    if device.lower() == "cpu":
        logger.info("Forcing CPU device")
        os.environ['CUDA_VISIBLE_DEVICES'] = ''
        _device_configured = True
        return None

    device_str = device.lower()
    for prefix in ['cuda:', 'gpu:']:
        if device_str.startswith(prefix):
            device_str = device_str[len(prefix):]
            break

    try:
        gpu_id = int(device_str)
    except ValueError:
        raise ConfigurationError(f"Invalid device specification: {device}. "
                         f"Use 'auto', 'cpu', or GPU index (e.g., '0', 'cuda:1')")

    logger.info(f"Using specified GPU {gpu_id}")
    os.environ['CUDA_VISIBLE_DEVICES'] = str(gpu_id)
    _device_configured = True
    return gpu_id


import jax
import jax.numpy as jnp

jax.config.update("jax_enable_x64", True)


def get_device_info() -> str:
    """Get available JAX devices as string."""
    devices = jax.devices()
    device_strs = [f"{d.platform}:{d.id}" for d in devices]
    return f"JAX devices: {device_strs}"


def is_gpu_available() -> bool:
    """Check if GPU is available for JAX."""
    return any(d.platform == 'gpu' for d in jax.devices())


__all__ = ['jax', 'jnp', 'get_device_info', 'is_gpu_available', 'select_device']
