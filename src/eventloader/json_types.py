"""JSON type aliases for the wire/cache boundary.

:data:`JSONValue` is the only type that crosses from the transport and the
cache into :mod:`eventloader.mapper`.  It is always the result of decoding a
complete response body or a complete cache blob.
"""

from typing import Union

JSONPrimitive = Union[str, int, float, bool, None]
JSONValue = Union[JSONPrimitive, list["JSONValue"], dict[str, "JSONValue"]]
JSONObject = dict[str, JSONValue]

__all__ = ["JSONPrimitive", "JSONValue", "JSONObject"]
