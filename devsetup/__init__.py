"""devsetup -- interactive local development environment setup.

Detects or installs the tools a React/TypeScript + PostgreSQL project needs,
provisions the local database and writes the project's boilerplate files.
"""

__version__ = "0.1.0"
