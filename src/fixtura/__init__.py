"""Declarative test fixture factories.

Define a factory from a model and a function returning default attributes,
then build in-memory instances or create persisted ones::

    address_factory = define(Address, lambda: {"street": "Main St", "city": "NY"})
    user_factory = define(
        User,
        lambda: {
            "email": sequence("user.email", lambda n: f"user{n}@mail.com"),
            "address": address_factory.associate(),
        },
    )

    user = await user_factory.build({"name": "Jane"})
"""

from fixtura.adapters import ModelAdapter, ObjectAdapter, PydanticAdapter
from fixtura.association import Association, is_association
from fixtura.config import FixturaConfig, get_config, load_config
from fixtura.factory import AttributesContext, Factory
from fixtura.merge import merge_deep
from fixtura.registry import (
    adapter_available,
    available_adapters,
    clean_up,
    configure,
    define,
    get_adapter,
    load_adapter,
    sequence,
    set_adapter,
)
from fixtura.sequences import SequenceRegistry, sequences

__version__ = "0.1.0"

__all__ = [
    "Association",
    "AttributesContext",
    "Factory",
    "FixturaConfig",
    "ModelAdapter",
    "ObjectAdapter",
    "PydanticAdapter",
    "SequenceRegistry",
    "__version__",
    "adapter_available",
    "available_adapters",
    "clean_up",
    "configure",
    "define",
    "get_adapter",
    "get_config",
    "is_association",
    "load_adapter",
    "load_config",
    "merge_deep",
    "sequence",
    "sequences",
    "set_adapter",
]
