# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Encoding policy registry.

Maps the config-level policy name ("dictionary", "bag_of_words", "tf_idf")
to the concrete class. The config loader, the encoder factory and the
persistence layer all resolve policies through here, so a persisted encoder
records nothing but the name.

Built-in policies register themselves when their module is imported;
`_register_builtins()` imports them on the first lookup.
"""

import logging

from strenc.encoding.policies.base import EncodingPolicy

logger = logging.getLogger(__name__)

_POLICY_REGISTRY: dict[str, type[EncodingPolicy]] = {}


def register_policy(name: str, cls: type[EncodingPolicy]) -> None:
    """
    Register a policy class under a unique name.

    Raises:
        ValueError: If ``name`` is already registered.
    """
    if name in _POLICY_REGISTRY:
        raise ValueError(
            f"Policy '{name}' is already registered to {_POLICY_REGISTRY[name].__name__}"
        )
    _POLICY_REGISTRY[name] = cls
    logger.debug("registered_policy", extra={"name": name, "cls": cls.__name__})


def get_policy(name: str) -> type[EncodingPolicy]:
    """
    Retrieve a registered policy class by name.

    Raises:
        KeyError: If ``name`` is not registered.
    """
    _register_builtins()
    if name not in _POLICY_REGISTRY:
        available = sorted(_POLICY_REGISTRY.keys())
        raise KeyError(f"Unknown encoding policy '{name}'. Available: {available}")
    return _POLICY_REGISTRY[name]


def list_policy_types() -> list[str]:
    """Return sorted list of all registered policy names."""
    _register_builtins()
    return sorted(_POLICY_REGISTRY.keys())


_BUILTINS_REGISTERED: bool = False


def _register_builtins() -> None:
    """Import the built-in policy modules so they register. Idempotent."""
    global _BUILTINS_REGISTERED
    if _BUILTINS_REGISTERED:
        return

    import strenc.encoding.policies.bag_of_words  # noqa: F401
    import strenc.encoding.policies.dictionary  # noqa: F401
    import strenc.encoding.policies.tf_idf  # noqa: F401

    _BUILTINS_REGISTERED = True
