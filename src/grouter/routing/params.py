"""Path parameter converters.

Built-in converters for route segments like ``{id:int}`` or ``{rest...}``.
"""

# (regex_pattern, python_type) for each supported converter
CONVERTERS: dict[str, tuple[str, type]] = {
    "int": (r"-?\d+", int),
    "float": (r"-?\d+(?:\.\d+)?", float),
    "str": (r"[^/]+", str),
    "path": (r".*", str),
}


def convert_param(value: str, param_type: str) -> str | int | float:
    """Convert a captured segment to the converter's Python type.

    Raises ``ValueError`` if the string cannot be converted.
    Raises ``KeyError`` if *param_type* is not a registered converter.
    """
    _, target_type = CONVERTERS[param_type]
    return target_type(value)
