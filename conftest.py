"""
Session setup for the fuzz test suite.

``.env`` is read before tests/conftest.py registers the Hypothesis
profiles, so a checkout can pick ``HYPOTHESIS_PROFILE`` (``fuzz`` or
``ci``) without exporting it in the shell.
"""

from dotenv import load_dotenv

load_dotenv()
