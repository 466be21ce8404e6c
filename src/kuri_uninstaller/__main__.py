"""!
@brief Allow ``python -m kuri_uninstaller``.
"""
import sys

from .main import main

sys.exit(main())
