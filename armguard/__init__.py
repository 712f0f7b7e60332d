"""
ArmGuard - Secret-leak scanner for Azure Resource Manager template outputs

Flags deployment template outputs that can expose secrets:
- Outputs calling list* functions (listKeys, listSecrets, ...)
- Outputs whose names suggest a password
- Outputs that reference securestring / secureobject parameters

Copyright (c) 2026 ArmGuard Contributors
Licensed under the Apache License 2.0
"""

__version__ = "1.0.0"
__author__ = "chiakiichan"


__all__ = [
    "__version__",
]
