from diweave._internal.markers import (
    FromParent,
    FromParentMarker,
    Inject,
    InjectMarker,
    Key,
    Maybe,
    MaybeMarker,
    constructor,
    inject,
)

__all__ = [
    "FromParent",
    "FromParentMarker",
    "Inject",
    "InjectMarker",
    "Key",
    "Maybe",
    "MaybeMarker",
    "constructor",
    "inject",
]
