"""naws — interactive, fuzzy-searchable front-end for AWS control planes.

Built on boto3 with a strict layered architecture.
"""

from naws.version import __version__

__all__: list[str] = ["__version__"]
