"""JAX configuration for the compressible kernels: 64-bit precision and device selection."""

from typing import Optional

import jax
import jax.numpy as jnp
from loguru import logger

jax.config.update("jax_enable_x64", True)

_device_configured = False


def select_device(device: Optional[str] = None) -> Optional[str]:
    """Pin JAX to a platform before its first computation.

    Parameters
    ----------
    device : str, optional
        Device specification:
        - None or "auto": leave the JAX default untouched
        - "cpu": force the CPU backend
        - "gpu" or "cuda": request the CUDA backend

    Returns
    -------
    platform : str or None
        The platform that was requested, None when left to JAX.

    Notes
    -----
    JAX backends are initialized lazily, so this has to run before the
    first array is created. Later calls are ignored.
    """
    global _device_configured

    if _device_configured:
        return None

    if device is None or device == "auto":
        _device_configured = True
        return None

    platform = device.lower()
    if platform == "gpu":
        platform = "cuda"
    if platform not in ("cpu", "cuda"):
        raise ValueError(f"Invalid device specification: {device}. "
                         f"Use 'auto', 'cpu' or 'gpu'")

    jax.config.update("jax_platforms", platform)
    _device_configured = True
    logger.info(f"JAX platform forced to {platform}")
    return platform


def get_device_info() -> str:
    """Get available JAX devices as string."""
    devices = jax.devices()
    device_strs = [f"{d.platform}:{d.id}" for d in devices]
    return f"JAX devices: {device_strs}"


__all__ = ['jax', 'jnp', 'get_device_info', 'select_device']
