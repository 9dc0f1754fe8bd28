# Ensure test runner can import the `userdump` package from a source checkout.
# Some local pytest invocations do not add the repository root to sys.path.
import os
import sys

REPO_ROOT = os.path.abspath(os.path.dirname(__file__))
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)
