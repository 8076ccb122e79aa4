"""
Language and extension tables shared by fragment extraction and filename
resolution.
"""

import os


# ── Extension → Language mapping ──

EXTENSION_MAP = {
    ".py": "python",
    ".js": "javascript",
    ".ts": "typescript",
    ".jsx": "javascript",
    ".tsx": "typescript",
    ".go": "go",
    ".rs": "rust",
    ".java": "java",
    ".rb": "ruby",
    ".cs": "csharp",
    ".cpp": "cpp",
    ".c": "c",
    ".swift": "swift",
    ".kt": "kotlin",
    ".php": "php",
    ".scala": "scala",
    ".html": "html",
    ".css": "css",
    ".scss": "scss",
    ".vue": "vue",
    ".svelte": "svelte",
    ".md": "markdown",
    ".json": "json",
    ".yaml": "yaml",
    ".yml": "yaml",
    ".xml": "xml",
    ".sql": "sql",
    ".sh": "bash",
    ".bat": "batch",
}

# Extensions a resolved filename may carry.
VALID_EXTENSIONS = frozenset({
    "js", "ts", "jsx", "tsx", "py", "java", "go", "rs", "cpp", "c", "cs",
    "php", "rb", "swift", "kt", "scala", "html", "css", "scss", "vue",
    "svelte", "md", "json", "yaml", "yml", "xml", "sql", "sh", "bat",
})


# ── Fence language tag → canonical extension ──

LANGUAGE_TO_EXTENSION = {
    "javascript": "js",
    "js": "js",
    "typescript": "ts",
    "ts": "ts",
    "jsx": "jsx",
    "tsx": "tsx",
    "python": "py",
    "py": "py",
    "java": "java",
    "go": "go",
    "golang": "go",
    "rust": "rs",
    "rs": "rs",
    "cpp": "cpp",
    "c++": "cpp",
    "c": "c",
    "csharp": "cs",
    "cs": "cs",
    "php": "php",
    "ruby": "rb",
    "rb": "rb",
    "swift": "swift",
    "kotlin": "kt",
    "kt": "kt",
    "scala": "scala",
    "html": "html",
    "css": "css",
    "scss": "scss",
    "vue": "vue",
    "svelte": "svelte",
    "json": "json",
    "yaml": "yaml",
    "yml": "yml",
    "xml": "xml",
    "sql": "sql",
    "bash": "sh",
    "shell": "sh",
    "sh": "sh",
    "zsh": "sh",
    "markdown": "md",
    "md": "md",
}

# Idiomatic filenames per extension, picked round-robin by fragment index.
CONTEXTUAL_FILENAMES = {
    "js": ["app.js", "index.js", "server.js", "script.js"],
    "ts": ["index.ts", "app.ts", "main.ts"],
    "py": ["main.py", "app.py", "script.py"],
    "json": ["package.json", "config.json", "data.json"],
    "html": ["index.html", "page.html"],
    "css": ["style.css", "main.css"],
    "md": ["README.md", "docs.md"],
    "sh": ["setup.sh", "script.sh", "install.sh"],
}


def get_extension(filename: str) -> str:
    """Lower-cased extension of *filename* without the dot ('' if none)."""
    _, ext = os.path.splitext(filename)
    return ext[1:].lower()


def detect_language_from_filename(filename: str) -> str | None:
    """Infer a fence language tag from a filename's extension."""
    _, ext = os.path.splitext(filename)
    return EXTENSION_MAP.get(ext.lower())


def extension_for_language(language: str | None) -> str | None:
    """Canonical file extension for a fence language tag, or ``None``."""
    if not language:
        return None
    return LANGUAGE_TO_EXTENSION.get(language.lower())
