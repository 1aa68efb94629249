"""
Layout rules a repository follows to be published as documentation.

- Documentation lives in a 'docs' folder at the repository root
- Documentation pages are markdown files (must end with '.md')
- A directory may list its children in display order in an 'index.txt'
  file, one key per line
"""

INDEX_FILE_NAME = "index.txt"
PAGE_SUFFIX = ".md"
ROOT_FOLDER = "docs"

# Version segment accepted in place of the latest release tag
LATEST_ALIAS = "latest"

# Stored in FileNode.last_update_date when GitHub has no history
UNKNOWN_DATE = "unknown"
