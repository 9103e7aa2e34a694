"""
File Classifier - decides which uploaded files are sent for translation

Policy is "translate unless clearly non-code": a file is skipped only when its
lowercased name ends with a suffix from NON_CODE_SUFFIXES. Files without an
extension (Dockerfile, Makefile, README) are translated. File contents are
never consulted.
"""
import posixpath
from typing import Dict, List, Optional, Any, Iterable
import logging

logger = logging.getLogger(__name__)


# Single deny-list used by the batch pipeline, the project report sampler and
# the file helpers. Matched against the end of the lowercased file name.
NON_CODE_SUFFIXES = (
    # Images
    '.jpg', '.jpeg', '.png', '.gif', '.svg', '.bmp', '.tiff', '.ico',
    # Documents
    '.pdf', '.doc', '.docx', '.xls', '.xlsx', '.ppt', '.pptx',
    # Archives
    '.zip', '.tar', '.gz', '.7z', '.rar',
    # Audio / video
    '.mp3', '.mp4', '.wav', '.avi', '.mov',
    # Fonts
    '.ttf', '.otf', '.woff', '.woff2', '.eot',
    # Compiled binaries
    '.so', '.dll', '.exe', '.bin',
    # Dotfiles
    '.gitignore', '.env', '.env.example', '.env.local',
    '.prettierrc', '.eslintrc', '.babelrc',
    # Lockfiles
    'package-lock.json', 'yarn.lock', 'pnpm-lock.yaml',
)

MIME_TYPES = {
    'html': 'text/html',
    'htm': 'text/html',
    'js': 'application/javascript',
    'jsx': 'application/javascript',
    'ts': 'application/typescript',
    'tsx': 'application/typescript',
    'css': 'text/css',
    'json': 'application/json',
    'txt': 'text/plain',
    'md': 'text/markdown',
    'xml': 'application/xml',
    'csv': 'text/csv',
    'py': 'text/x-python',
    'rb': 'text/x-ruby',
    'java': 'text/x-java',
    'c': 'text/x-c',
    'cpp': 'text/x-c++',
    'cs': 'text/x-csharp',
    'go': 'text/x-go',
    'php': 'text/x-php',
    'swift': 'text/x-swift',
    'kt': 'text/x-kotlin',
    'rs': 'text/x-rust',
}


def should_translate(file_name: str) -> bool:
    """
    Check whether a file should be sent for translation

    Args:
        file_name: File name, any case, with or without extension

    Returns:
        False for deny-listed suffixes, True otherwise
    """
    lower_name = file_name.lower()
    return not lower_name.endswith(NON_CODE_SUFFIXES)


def get_file_type(file_name: str) -> str:
    """Return the lowercased extension without the dot, or 'unknown'"""
    extension = posixpath.splitext(file_name)[1].lower()
    if not extension:
        return 'unknown'
    return extension[1:]


def get_mime_type(file_name: str) -> str:
    """Return the MIME type for a file name, 'application/octet-stream' if unknown"""
    return MIME_TYPES.get(get_file_type(file_name), 'application/octet-stream')


def enhance_file_metadata(file_data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Fill in file_type and file_size when they are missing

    Args:
        file_data: File record fields (file_name, source_code, ...)

    Returns:
        The same dict, updated in place
    """
    file_name = file_data.get("file_name")
    if not file_name:
        return file_data

    if not file_data.get("file_type"):
        file_data["file_type"] = get_file_type(file_name)

    source_code = file_data.get("source_code")
    if source_code and not file_data.get("file_size"):
        file_data["file_size"] = len(source_code.encode("utf-8"))

    return file_data


def organize_files_by_directory(files: Iterable[Dict[str, Optional[str]]]) -> Dict[str, List[str]]:
    """Group file names by the directory part of their file_path"""
    directories: Dict[str, List[str]] = {}
    for file in files:
        dir_path = posixpath.dirname(file.get("file_path") or "") or "."
        directories.setdefault(dir_path, []).append(file["file_name"])
    return directories
