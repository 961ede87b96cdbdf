"""gitemplate - scaffold new git repositories from template repositories.

Clones a template, replaces ``gitemplate_<key>`` macros in file contents and
path names, then starts a fresh history.
"""

__version__ = "0.2.0"
