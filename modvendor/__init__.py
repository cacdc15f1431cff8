"""modvendor.

A small build utility that copies non-Go files (headers, protobuf schemas,
assets) from the Go module cache into a project's ``vendor/`` directory after
``go mod vendor`` has pruned them.
"""

__all__: list[str] = ["__version__"]

__version__: str = "0.1.0"
