"""Tools package for the sandboxed filesystem server.

Each tool is implemented in its own module for maintainability.
"""

from tools.copy_file import copy_file
from tools.create_directory import create_directory
from tools.delete_file import delete_file
from tools.get_file_info import get_file_info
from tools.list_allowed_directories import list_allowed_directories
from tools.list_directory import list_directory
from tools.modify_file import modify_file
from tools.move_file import move_file
from tools.read_file import read_file
from tools.read_multiple_files import read_multiple_files
from tools.search_files import search_files
from tools.search_within_files import search_within_files
from tools.tree import tree
from tools.write_file import write_file

__all__ = [
    "read_file",
    "write_file",
    "list_directory",
    "create_directory",
    "copy_file",
    "move_file",
    "search_files",
    "get_file_info",
    "list_allowed_directories",
    "read_multiple_files",
    "tree",
    "delete_file",
    "modify_file",
    "search_within_files",
]
