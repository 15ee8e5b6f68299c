"""Decodes free-form model replies into an ordered list of files.

Two passes run over the reply:

1. A complete ``<!DOCTYPE html> ... </html>`` document becomes ``index.html``
   and that exact span is cut out of the text.
2. Fenced code blocks in what remains become one file each. The fence header
   may carry a language (```` ```jsx ````), a filename annotation
   (```` ```file=App.jsx ````, ```` ```jsx filename="App.jsx" ````), a
   ``lang:path`` pair (```` ```jsx:src/App.jsx ````) or a bare filename. A line
   right above the fence holding nothing but a marked-up filename
   (``**App.jsx**``, ```` `App.jsx` ````, ``App.jsx:``) also names the block.

When neither pass finds anything, the reply is salvaged as HTML if it
clearly contains markup, otherwise returned verbatim as ``response.txt``.

Files keep detection order and duplicate names are not merged.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Tuple, Union

from .models import DEFAULT_LANGUAGE, GeneratedFile, GenerationResult

EXTENSIONS = {
    "javascript": "js",
    "js": "js",
    "typescript": "ts",
    "ts": "ts",
    "jsx": "jsx",
    "tsx": "tsx",
    "python": "py",
    "py": "py",
    "java": "java",
    "c": "c",
    "cpp": "cpp",
    "c++": "cpp",
    "csharp": "cs",
    "cs": "cs",
    "go": "go",
    "rust": "rs",
    "ruby": "rb",
    "php": "php",
    "html": "html",
    "css": "css",
    "json": "json",
    "yaml": "yaml",
    "yml": "yaml",
    "markdown": "md",
    "md": "md",
    "sql": "sql",
    "swift": "swift",
    "kotlin": "kt",
    "shell": "sh",
    "bash": "sh",
    "sh": "sh",
}

HTML_SKELETON = """<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>Generated App</title>
</head>
<body>
{body}
</body>
</html>"""

DOCTYPE_DOCUMENT = re.compile(r"<!DOCTYPE\s+html\b[^>]*>.*?</html\s*>", re.IGNORECASE | re.DOTALL)
DOCTYPE_SPAN = re.compile(r"<!DOCTYPE\b.*?</html\s*>", re.IGNORECASE | re.DOTALL)
HTML_SPAN = re.compile(r"<html\b.*?</html\s*>", re.IGNORECASE | re.DOTALL)
DOCTYPE_MARKER = re.compile(r"<!DOCTYPE", re.IGNORECASE)
BODY_PAIR = re.compile(r"<body\b.*?</body\s*>", re.IGNORECASE | re.DOTALL)
HTML_MARKER = re.compile(r"<html\b", re.IGNORECASE)

FENCED_BLOCK = re.compile(r"```(?P<info>[^\n`]*)\r?\n(?P<body>.*?)```", re.DOTALL)
FILENAME_ANNOTATION = re.compile(r"""\b(?:file|filename|path)(?:\s*[=:]\s*|\s+)['"]?(?P<name>[^\s'"`]+)['"]?""", re.IGNORECASE)
LANG_PATH = re.compile(r"""^(?P<lang>[A-Za-z0-9_+#-]+):(?P<name>[^\s'"`]+)$""")
FILENAME_TOKEN = re.compile(r"^[\w@./-]*[\w-]\.[A-Za-z0-9]+$")
FILENAME_LINE = re.compile(r"""^[\s#>*_`'"-]*(?:(?:file|filename|path)(?:\s*[=:]\s*|\s+))?(?P<name>[\w@./-]*[\w-]\.[A-Za-z0-9]+)[\s*_`'":]*$""", re.IGNORECASE)
FILENAME_KEYWORDS = ("file", "filename", "path")


@dataclass(frozen=True)
class Found:
    file: GeneratedFile
    remaining: str


@dataclass(frozen=True)
class NotFound:
    remaining: str


Extraction = Union[Found, NotFound]


def extension_for(language: str) -> str:
    return EXTENSIONS.get(language.strip().lower(), "txt")


def wrap_html(body: str) -> str:
    return HTML_SKELETON.format(body=body.strip())


def _looks_like_filename(token: str) -> bool:
    return token.lower() not in EXTENSIONS and bool(FILENAME_TOKEN.match(token))


def _language_from_filename(filename: str) -> str:
    base = filename.rsplit("/", 1)[-1]
    if "." not in base:
        return ""
    return base.rsplit(".", 1)[-1].lower()


def parse_fence_info(info: str) -> Tuple[str, str]:
    """Splits a fence header into (language, filename); either may be empty."""
    language = ""
    filename = ""
    annotation = FILENAME_ANNOTATION.search(info)
    if annotation:
        filename = annotation.group("name")
        info = info[: annotation.start()] + info[annotation.end() :]

    for token in info.split():
        token = token.strip("'\"")
        if not token or token.lower() in FILENAME_KEYWORDS:
            continue
        pair = LANG_PATH.match(token)
        if pair and not language and not filename:
            language, filename = pair.group("lang"), pair.group("name")
        elif not filename and _looks_like_filename(token):
            filename = token
        elif not language:
            language = token
    return language, filename


def _filename_above(text: str, fence_start: int) -> str:
    """Returns a filename written alone on the line just above a fence.

    The name must be marked up (backticks, bold, a heading, a `file:` label or a
    trailing colon); a bare `node.js` or `v2.0` line is prose.
    """
    before = text[:fence_start]
    if not before.endswith("\n"):
        return ""
    lines = before[:-1].rsplit("\n", 1)
    match = FILENAME_LINE.match(lines[-1])
    if not match or match.group("name").lower() in EXTENSIONS:
        return ""
    if lines[-1].strip() == match.group("name"):
        return ""
    return match.group("name")


def extract_html_document(text: str) -> Extraction:
    match = DOCTYPE_DOCUMENT.search(text)
    if not match:
        return NotFound(remaining=text)
    document = match.group(0)
    remaining = text[: match.start()] + text[match.end() :]
    return Found(file=GeneratedFile(name="index.html", content=document, language="html"), remaining=remaining)


def extract_fenced_blocks(text: str, already_found: int = 0) -> List[GeneratedFile]:
    files: List[GeneratedFile] = []
    for match in FENCED_BLOCK.finditer(text):
        content = match.group("body").strip()
        if not content:
            continue

        language, filename = parse_fence_info(match.group("info"))
        if not filename:
            filename = _filename_above(text, match.start())

        if filename and not language:
            language = _language_from_filename(filename)

        if not filename and language:
            filename = f"main.{extension_for(language)}"
        elif not filename:
            filename = f"file-{already_found + len(files) + 1}.txt"
        language = language or DEFAULT_LANGUAGE

        if language.lower() == "html" and filename == "index.html" and not DOCTYPE_MARKER.search(content):
            content = wrap_html(content)

        files.append(GeneratedFile(name=filename, content=content, language=language))
    return files


def has_html_markers(text: str) -> bool:
    return bool(HTML_MARKER.search(text) or DOCTYPE_MARKER.search(text) or BODY_PAIR.search(text))


def fallback_file(text: str) -> GeneratedFile:
    """Single file for a reply in which no document or fenced block was found."""
    if has_html_markers(text):
        span = DOCTYPE_SPAN.search(text) or HTML_SPAN.search(text)
        if span:
            return GeneratedFile(name="index.html", content=span.group(0).strip(), language="html")
        return GeneratedFile(name="index.html", content=wrap_html(text), language="html")
    return GeneratedFile(name="response.txt", content=text, language=DEFAULT_LANGUAGE)


def decode_files(raw_text: str) -> List[GeneratedFile]:
    files: List[GeneratedFile] = []
    extraction = extract_html_document(raw_text)
    if isinstance(extraction, Found):
        files.append(extraction.file)

    files.extend(extract_fenced_blocks(extraction.remaining, already_found=len(files)))

    if not files:
        files.append(fallback_file(extraction.remaining))
    return files


def decode_response(raw_text: str) -> GenerationResult:
    raw_text = raw_text or ""
    return GenerationResult(generated_text=raw_text, files=decode_files(raw_text))
