from .keys import ConnectivityKey, KeyKind
from .resolver import ConnectivityMap, ConnectivityResolver, build_connectivity_map

__all__ = [
    "ConnectivityKey", "KeyKind",
    "ConnectivityMap", "ConnectivityResolver", "build_connectivity_map",
]
