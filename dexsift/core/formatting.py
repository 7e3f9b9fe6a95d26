"""
Class Name Formatting
======================

Converts dex type descriptors into the dotted class names used in test
identifiers: ``Lcom/example/FooTest;`` becomes ``com.example.FooTest#`` so
that appending a method name yields ``com.example.FooTest#testBar``.
"""

from __future__ import annotations

from typing import Callable

DEFAULT_SEPARATOR: str = "#"

Formatter = Callable[[str], str]


def format_class_name(descriptor: str, separator: str = DEFAULT_SEPARATOR) -> str:
    """Return the dotted class name of *descriptor* followed by *separator*.

    Nested classes keep their binary ``$`` form
    (``Lcom/example/Outer$InnerTest;`` -> ``com.example.Outer$InnerTest#``).

    Raises:
        ValueError: *descriptor* is not a class descriptor.
    """
    if len(descriptor) < 3 or not descriptor.startswith("L") or not descriptor.endswith(";"):
        raise ValueError(f"not a class descriptor: {descriptor!r}")
    return descriptor[1:-1].replace("/", ".") + separator


def make_formatter(separator: str = DEFAULT_SEPARATOR) -> Formatter:
    """Bind *separator* into a single-argument formatter."""

    def _format(descriptor: str) -> str:
        return format_class_name(descriptor, separator)

    return _format


def to_descriptor(class_name: str) -> str:
    """Inverse conversion: ``com.example.Foo`` -> ``Lcom/example/Foo;``.

    Descriptors are returned unchanged, so user input can take either form.
    """
    if class_name.startswith("L") and class_name.endswith(";"):
        return class_name
    return "L" + class_name.replace(".", "/") + ";"
