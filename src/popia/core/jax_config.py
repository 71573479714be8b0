"""JAX settings for the distance kernel.

Frequencies are float64. JAX defaults to float32, so 64-bit mode has to be on
before the first array is created, or the JAX distances drift from the numpy
ones. ``pairwise_distances`` calls ``ensure_jax_configured`` itself; call
``configure_jax`` directly only to pick a platform.
"""

from __future__ import annotations

from typing import Any

import jax
from loguru import logger

_configured = False


def configure_jax(
    enable_x64: bool = True,
    platform: str | None = None,
) -> None:
    """Set JAX precision and, optionally, its platform.

    Args:
        enable_x64: Turn on 64-bit floats.
        platform: "cpu", "gpu" or "tpu". None leaves the choice to JAX.

    Example:
        >>> configure_jax(platform="cpu")
    """
    global _configured

    if enable_x64:
        jax.config.update("jax_enable_x64", True)
    if platform is not None:
        jax.config.update("jax_platform_name", platform)
    _configured = True

    info = get_jax_info()
    logger.debug(
        f"JAX {info['version']} on {info['backend']} "
        f"({len(info['devices'])} device(s), x64={info['x64_enabled']})"
    )


def ensure_jax_configured() -> None:
    """Apply the default configuration once if configure_jax was never called."""
    if not _configured:
        configure_jax()


def get_jax_info() -> dict[str, Any]:
    """Describe the active JAX runtime.

    Returns:
        Dict with ``version``, ``backend`` (default platform name),
        ``devices`` (string form of each device) and ``x64_enabled``.
    """
    return {
        "version": jax.__version__,
        "backend": jax.default_backend(),
        "devices": [str(device) for device in jax.devices()],
        "x64_enabled": bool(jax.config.jax_enable_x64),
    }
