"""Root conftest.py for test configuration.

Ensures local src/ directory takes priority over any installed packages, and
puts this directory on sys.path so the sample modules resolve by name.
"""

import sys
from pathlib import Path

# Insert local src directory at the beginning of sys.path
# This ensures that the local jitlog package is used, not any installed one
_src_dir = Path(__file__).parent.parent / "src"
if str(_src_dir) not in sys.path:
    sys.path.insert(0, str(_src_dir))

# Sample code units (jit_samples) and log builders are imported by short name
_tests_dir = Path(__file__).parent
if str(_tests_dir) not in sys.path:
    sys.path.insert(1, str(_tests_dir))

# Force reimport of jitlog modules if already imported
for module_name in list(sys.modules.keys()):
    if module_name.startswith("jitlog"):
        del sys.modules[module_name]
