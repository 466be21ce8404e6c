"""!
@brief Kuri Uninstaller package root.
@details Modules under this namespace find files, folders and registry keys
left behind after a program's own uninstaller has run and remove the ones the
user selects.
"""

__all__ = [
    "app_state",
    "backup",
    "confirm",
    "constants",
    "deletion",
    "elevation",
    "fs_tools",
    "logging_ext",
    "main",
    "models",
    "programs",
    "registry_tools",
    "scanner",
    "terms",
    "ui",
    "version",
]
