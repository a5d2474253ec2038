"""Infrastructure layer — external system integration.

This layer wraps all interaction with boto3, fzf, the user's editor and
the operating system.  Every raw third-party exception must be caught
here and re-raised as a :class:`~naws.exceptions.NawsError` subclass.

Rules
-----
* No imports from ``cli`` or ``domains``.
* No user-facing output (no ``print()``, no Rich rendering).
* Must expose clean, typed interfaces consumed by the core layer.
"""

from naws.infra.aws_gateway import Boto3Gateway
from naws.infra.binaries import BinaryStatus, detect_binary, detect_editor, detect_fzf, require_fzf
from naws.infra.editor import ExternalEditor, scratch_file
from naws.infra.fzf_selector import FzfSelector

__all__: list[str] = [
    "BinaryStatus",
    "Boto3Gateway",
    "ExternalEditor",
    "FzfSelector",
    "detect_binary",
    "detect_editor",
    "detect_fzf",
    "require_fzf",
    "scratch_file",
]
